"""Unit tests for project scaffolding."""

import json

from generation_layer.models.enums import Platform
from generation_layer.models.generation import GenerationOptions
from generation_layer.pipeline import add_scaffolding

APP = "export default function App() { return null; }\n"


def test_web_tailwind_project(prompt_builder):
    files = {"src/App.jsx": APP}

    add_scaffolding(files, GenerationOptions(platform=Platform.WEB), prompt_builder, analysis="A login page")

    assert set(files) == {
        "src/App.jsx",
        "package.json",
        "public/index.html",
        "src/index.css",
        "src/index.jsx",
        "tailwind.config.js",
        "postcss.config.js",
        "README.md",
    }
    package = json.loads(files["package.json"])
    assert package["dependencies"]["react"] == "^18.2.0"
    assert "tailwindcss" in package["devDependencies"]
    assert "react-router-dom" not in package["dependencies"]
    assert "import App from './App';" in files["src/index.jsx"]
    assert files["src/index.css"].startswith("@tailwind base;")
    assert "A login page" in files["README.md"]
    assert "- `src/App.jsx`" in files["README.md"]
    assert "- `README.md`" in files["README.md"]
    assert "npm install" in files["README.md"]


def test_existing_files_never_overwritten(prompt_builder):
    files = {
        "src/App.tsx": APP,
        "src/index.tsx": "custom entry",
        "package.json": "{}",
        "README.md": "# Mine",
    }

    add_scaffolding(files, GenerationOptions(platform=Platform.WEB), prompt_builder)

    assert files["package.json"] == "{}"
    assert files["README.md"] == "# Mine"
    assert "src/index.jsx" not in files


def test_plain_css_with_routing(prompt_builder):
    files = {"src/App.jsx": APP}
    options = GenerationOptions(platform=Platform.WEB, styling="CSS Modules", routing="/login and /home")

    add_scaffolding(files, options, prompt_builder)

    assert "tailwind.config.js" not in files
    assert "postcss.config.js" not in files
    assert files["src/index.css"].startswith("body {")
    package = json.loads(files["package.json"])
    assert "react-router-dom" in package["dependencies"]
    assert "tailwindcss" not in package["devDependencies"]


def test_web_without_app_module_gets_no_entry_point(prompt_builder):
    files = {"src/components/Card.jsx": APP}

    add_scaffolding(files, GenerationOptions(platform=Platform.WEB), prompt_builder)

    assert "src/index.jsx" not in files


def test_native_platforms_only_get_readme(prompt_builder):
    files = {"app/src/main/java/com/example/app/MainActivity.kt": "class MainActivity"}

    add_scaffolding(files, GenerationOptions(platform=Platform.ANDROID), prompt_builder)

    assert set(files) == {"app/src/main/java/com/example/app/MainActivity.kt", "README.md"}
    assert "Android Studio" in files["README.md"]
    assert "Jetpack Compose" in files["README.md"]
