"""Starter file templates."""
import json

from app.services.scaffold_templates import generate_project_files, gitignore, python_requirements


def _by_path(files):
    return {f.path: f for f in files}


def test_readme_and_gitignore_always_first():
    for language in ("python", "javascript", "java", "rust"):
        files = generate_project_files("demo", language, None, "scratch")
        assert [f.name for f in files[:2]] == ["README.md", ".gitignore"]


def test_readme_mentions_framework():
    files = generate_project_files("shop", "javascript", "react", "scratch")
    assert "A javascript project built with react created with DevFlowHub." in files[0].content


def test_typescript_react_project():
    files = _by_path(generate_project_files("My App", "TypeScript", "react", "scratch"))
    assert set(files) == {"README.md", ".gitignore", "package.json", "src/App.ts", "src/index.ts", "tsconfig.json"}
    assert "const App: React.FC" in files["src/App.ts"].content
    assert "as HTMLElement" in files["src/index.ts"].content

    package = json.loads(files["package.json"].content)
    assert package["name"] == "my-app"
    assert package["scripts"]["start"] == "react-scripts start"


def test_plain_javascript_project():
    files = _by_path(generate_project_files("cli", "javascript", None, "scratch"))
    assert "src/index.js" in files
    assert "tsconfig.json" not in files

    package = json.loads(files["package.json"].content)
    assert package["description"] == "A vanilla project created with DevFlowHub"
    assert package["scripts"]["build"] == 'echo "No build step needed"'


def test_typescript_build_script_uses_tsc():
    files = _by_path(generate_project_files("lib", "typescript", None, "scratch"))
    assert json.loads(files["package.json"].content)["scripts"]["build"] == "tsc"
    assert "const message: string" in files["src/index.ts"].content


def test_express_scripts():
    files = _by_path(generate_project_files("api", "javascript", "express", "scratch"))
    scripts = json.loads(files["package.json"].content)["scripts"]
    assert scripts == {"start": "node src/server.js", "dev": "nodemon src/server.js"}
    assert "app.listen(PORT" in files["src/server.js"].content


def test_python_gitignore_has_python_block():
    assert "__pycache__/" in gitignore("Python")
    assert "__pycache__/" not in gitignore("javascript")
    assert "node_modules/" in gitignore("python")


def test_python_requirements_by_framework():
    assert "flask>=2.0.0" in python_requirements("flask")
    assert "django>=4.0.0" in python_requirements("django")
    plain = python_requirements(None)
    assert "requests>=2.28.0" in plain
    assert "flask" not in plain


def test_java_class_name_strips_punctuation():
    files = generate_project_files("my-cool app!", "java", None, "scratch")
    java = files[-1]
    assert java.path == "src/main/java/mycoolapp.java"
    assert "public class mycoolapp {" in java.content


def test_unknown_language_gets_placeholder():
    files = generate_project_files("demo", "Haskell", None, "scratch")
    assert files[-1].path == "main.txt"
    assert "This is a Haskell project created with DevFlowHub." in files[-1].content
