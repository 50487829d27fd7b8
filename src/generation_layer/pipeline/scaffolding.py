"""
Project scaffolding added around generated source files.

Scaffold files only fill gaps: a path the model already produced is never
overwritten.

web:     package.json, public/index.html, src/index.jsx, src/index.css,
         tailwind.config.js + postcss.config.js (Tailwind only), README.md
android: README.md
ios:     README.md
"""

import json
from typing import Optional

from generation_layer.llm.prompt_builder import PromptBuilder
from generation_layer.models.enums import Platform
from generation_layer.models.generation import GenerationOptions

PROJECT_NAME = "digital-studio-app"

TAILWIND_CONFIG = """/** @type {import('tailwindcss').Config} */
module.exports = {
  content: ["./src/**/*.{js,jsx,ts,tsx}", "./public/index.html"],
  theme: {
    extend: {},
  },
  plugins: [],
};
"""

POSTCSS_CONFIG = """module.exports = {
  plugins: {
    tailwindcss: {},
    autoprefixer: {},
  },
};
"""

INDEX_HTML = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Digital Studio App</title>
  </head>
  <body>
    <noscript>You need to enable JavaScript to run this app.</noscript>
    <div id="root"></div>
  </body>
</html>
"""

INDEX_CSS_TAILWIND = """@tailwind base;
@tailwind components;
@tailwind utilities;
"""

INDEX_CSS_PLAIN = """body {
  margin: 0;
  font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', 'Roboto', 'Oxygen',
    'Ubuntu', 'Cantarell', 'Fira Sans', 'Droid Sans', 'Helvetica Neue', sans-serif;
  -webkit-font-smoothing: antialiased;
  -moz-osx-font-smoothing: grayscale;
}
"""


def _entry_point(app_module: str) -> str:
    return (
        "import React from 'react';\n"
        "import ReactDOM from 'react-dom/client';\n"
        "import './index.css';\n"
        f"import App from './{app_module}';\n"
        "\n"
        "const root = ReactDOM.createRoot(document.getElementById('root'));\n"
        "root.render(\n"
        "  <React.StrictMode>\n"
        "    <App />\n"
        "  </React.StrictMode>\n"
        ");\n"
    )


def package_json(options: GenerationOptions) -> str:
    dependencies = {
        "react": "^18.2.0",
        "react-dom": "^18.2.0",
    }
    dev_dependencies = {"react-scripts": "5.0.1"}
    if _uses_tailwind(options):
        dev_dependencies.update({
            "tailwindcss": "^3.4.0",
            "autoprefixer": "^10.4.16",
            "postcss": "^8.4.32",
        })
    if options.routing:
        dependencies["react-router-dom"] = "^6.21.0"

    return json.dumps(
        {
            "name": PROJECT_NAME,
            "version": "1.0.0",
            "private": True,
            "description": f"Generated {options.resolved_framework} application",
            "scripts": {
                "start": "react-scripts start",
                "build": "react-scripts build",
                "test": "react-scripts test",
            },
            "dependencies": dependencies,
            "devDependencies": dev_dependencies,
            "browserslist": {
                "production": [">0.2%", "not dead", "not op_mini all"],
                "development": [
                    "last 1 chrome version",
                    "last 1 firefox version",
                    "last 1 safari version",
                ],
            },
        },
        indent=2,
    ) + "\n"


def _uses_tailwind(options: GenerationOptions) -> bool:
    return "tailwind" in options.styling.lower()


def _web_app_module(files: dict[str, str]) -> Optional[str]:
    for candidate in ("src/App.jsx", "src/App.tsx", "src/App.js"):
        if candidate in files:
            return candidate.rsplit("/", 1)[1].rsplit(".", 1)[0]
    return None


def add_scaffolding(
    files: dict[str, str],
    options: GenerationOptions,
    prompt_builder: PromptBuilder,
    analysis: str = "",
) -> dict[str, str]:
    """
    Add scaffold files for paths the model did not produce.

    Mutates and returns `files`.
    """
    if options.platform == Platform.WEB:
        files.setdefault("package.json", package_json(options))
        files.setdefault("public/index.html", INDEX_HTML)
        files.setdefault(
            "src/index.css",
            INDEX_CSS_TAILWIND if _uses_tailwind(options) else INDEX_CSS_PLAIN,
        )
        app_module = _web_app_module(files)
        if app_module and "src/index.js" not in files and "src/index.tsx" not in files:
            files.setdefault("src/index.jsx", _entry_point(app_module))
        if _uses_tailwind(options):
            files.setdefault("tailwind.config.js", TAILWIND_CONFIG)
            files.setdefault("postcss.config.js", POSTCSS_CONFIG)

    readme_files = sorted(set(files) | {"README.md"})
    files.setdefault(
        "README.md",
        prompt_builder.render(
            "readme.md.j2",
            project_name="Digital Studio App",
            platform=options.platform.value,
            framework=options.resolved_framework,
            styling=options.styling,
            architecture=options.architecture,
            analysis=analysis,
            files=readme_files,
        ),
    )
    return files
