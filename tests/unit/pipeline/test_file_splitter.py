"""Unit tests for FileSplitter and generated path normalization."""

import pytest

from generation_layer.models.enums import Platform
from generation_layer.pipeline import FileSplitter, normalize_path
from generation_layer.pipeline.exceptions import InvalidGeneratedPath

WEB_WITH_MARKERS = """```jsx
// File: src/App.jsx
export default function App() {}
// File: ./src/components/Button.jsx
export const Button = () => null;
```"""

WEB_DECLARATIONS = """import React from 'react';

function Header() {
  return <h1>Don't panic</h1>;
}

export default function App() {
  const Inner = 1;
  return <Header />;
}
"""

ANDROID_DECLARATIONS = """package com.example.app

import androidx.compose.runtime.Composable

@Composable
fun LoginScreen() {
    Text("Login")
}

class MainActivity : ComponentActivity() {
    override fun onCreate(savedInstanceState: Bundle?) {}
}
"""

IOS_DECLARATIONS = """import SwiftUI

struct ContentView: View {
    var body: some View { ProfileView() }
}

struct ProfileView: View {
    var body: some View { Text("Profile") }
}
"""


@pytest.fixture
def splitter():
    return FileSplitter()


class TestMarkers:

    def test_markers_define_files(self, splitter):
        files = splitter.split(WEB_WITH_MARKERS, Platform.WEB)

        assert files == {
            "src/App.jsx": "export default function App() {}\n",
            "src/components/Button.jsx": "export const Button = () => null;\n",
        }

    def test_comment_styles(self, splitter):
        text = "# File: scripts/build.sh\necho hi\n<!-- File: public/index.html -->\n<html></html>\n"

        files = splitter.split(text, Platform.WEB)

        assert set(files) == {"scripts/build.sh", "public/index.html"}
        assert files["public/index.html"] == "<html></html>\n"

    def test_duplicate_marker_keeps_last(self, splitter):
        text = "// File: src/App.jsx\nfirst\n// File: src/App.jsx\nsecond\n"

        assert splitter.split(text, Platform.WEB) == {"src/App.jsx": "second\n"}

    def test_text_before_first_marker_is_not_a_file(self, splitter):
        text = "Here is your project:\n// File: src/App.jsx\nexport default function App() {}\n"

        files = splitter.split(text, Platform.WEB)

        assert files == {"src/App.jsx": "export default function App() {}\n"}


class TestDeclarations:

    def test_web_components_get_their_own_files(self, splitter):
        files = splitter.split(WEB_DECLARATIONS, Platform.WEB, "React")

        assert set(files) == {"src/components/Header.jsx", "src/App.jsx"}
        # Shared imports are copied into every file
        assert files["src/components/Header.jsx"].startswith("import React from 'react';\n\nfunction Header()")
        assert files["src/App.jsx"].startswith("import React from 'react';\n\nexport default function App()")
        assert "const Inner = 1;" in files["src/App.jsx"]

    def test_constants_stay_with_the_components_using_them(self, splitter):
        text = (
            "import React from 'react';\n"
            "const API_URL = 'https://api.example.com';\n"
            "export default function App() {\n"
            "  return <div>{API_URL}</div>;\n"
            "}\n"
        )

        files = splitter.split(text, Platform.WEB, "React")

        assert list(files) == ["src/App.jsx"]
        assert "const API_URL = 'https://api.example.com';" in files["src/App.jsx"]

    def test_constant_header_is_shared(self, splitter):
        text = (
            "const MAX_ITEMS = 5;\n"
            "function List() {\n  return MAX_ITEMS;\n}\n"
            "export default function App() {\n  return <List />;\n}\n"
        )

        files = splitter.split(text, Platform.WEB, "React")

        assert set(files) == {"src/components/List.jsx", "src/App.jsx"}
        assert all(content.startswith("const MAX_ITEMS = 5;") for content in files.values())

    def test_declarations_inside_bodies_ignored(self, splitter):
        text = "export default function App() {\n  return (\n<div>\nfunction Fake() {}\n</div>\n  );\n}\n"

        assert list(splitter.split(text, Platform.WEB)) == ["src/App.jsx"]

    def test_typescript_extension(self, splitter):
        files = splitter.split("export default function App() {}\n", Platform.WEB, "React TypeScript")

        assert list(files) == ["src/App.tsx"]

    def test_android(self, splitter):
        files = splitter.split(ANDROID_DECLARATIONS, Platform.ANDROID)

        root = "app/src/main/java/com/example/app"
        assert set(files) == {f"{root}/LoginScreen.kt", f"{root}/MainActivity.kt"}
        assert files[f"{root}/LoginScreen.kt"].startswith("package com.example.app")
        assert "@Composable\nfun LoginScreen()" in files[f"{root}/LoginScreen.kt"]

    def test_ios(self, splitter):
        files = splitter.split(IOS_DECLARATIONS, Platform.IOS)

        assert set(files) == {"App/ContentView.swift", "App/ProfileView.swift"}
        assert files["App/ProfileView.swift"].startswith("import SwiftUI")


class TestFallback:

    @pytest.mark.parametrize("platform,expected", [
        (Platform.WEB, "src/App.jsx"),
        (Platform.ANDROID, "app/src/main/java/com/example/app/MainActivity.kt"),
        (Platform.IOS, "App/ContentView.swift"),
    ])
    def test_default_file(self, splitter, platform, expected):
        assert splitter.split("console.log('hi');", platform) == {expected: "console.log('hi');\n"}

    def test_blank_text(self, splitter):
        assert splitter.split("```\n```", Platform.WEB) == {}


@pytest.mark.parametrize("text", [WEB_WITH_MARKERS, WEB_DECLARATIONS, "plain text"])
def test_split_is_deterministic(splitter, text):
    assert splitter.split(text, Platform.WEB) == splitter.split(text, Platform.WEB)


class TestNormalizePath:

    @pytest.mark.parametrize("raw,expected", [
        ("src/App.jsx", "src/App.jsx"),
        ("./src/App.jsx", "src/App.jsx"),
        ("src\\components\\Card.jsx", "src/components/Card.jsx"),
        ("  README.md ", "README.md"),
    ])
    def test_valid(self, raw, expected):
        assert normalize_path(raw) == expected

    @pytest.mark.parametrize("raw", [
        "/etc/passwd",
        "C:/Windows/system.ini",
        "../outside.js",
        "src/../../outside.js",
        "",
        "src/",
    ])
    def test_rejected(self, raw):
        with pytest.raises(InvalidGeneratedPath) as exc_info:
            normalize_path(raw)

        assert exc_info.value.details["path"] == raw
