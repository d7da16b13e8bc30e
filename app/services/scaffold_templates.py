"""Starter file templates for newly created projects."""
import json
import re
from typing import List, Optional

from app.schemas.scaffold import ScaffoldFile


def generate_project_files(
    name: str,
    language: str,
    framework: Optional[str],
    template: str,
) -> List[ScaffoldFile]:
    """README and .gitignore first, then the language-specific files."""
    lang = language.lower()
    files = [
        ScaffoldFile(name="README.md", path="README.md", content=readme(name, language, framework)),
        ScaffoldFile(name=".gitignore", path=".gitignore", content=gitignore(language)),
    ]

    if lang in ("javascript", "typescript"):
        files.extend(javascript_files(name, language, framework, template))
    elif lang == "python":
        files.extend(python_files(name, framework, template))
    elif lang == "java":
        files.extend(java_files(name, framework, template))
    else:
        files.append(ScaffoldFile(
            name="main.txt",
            path="main.txt",
            content=f"# {name}\n\nThis is a {language} project created with DevFlowHub.\n\nStart coding here!",
        ))
    return files


def javascript_files(name: str, language: str, framework: Optional[str], template: str) -> List[ScaffoldFile]:
    is_typescript = language.lower() == "typescript"
    ext = "ts" if is_typescript else "js"
    files = [
        ScaffoldFile(name="package.json", path="package.json",
                     content=package_json(name, framework, is_typescript)),
    ]

    if framework in ("react", "next"):
        files.append(ScaffoldFile(name=f"App.{ext}", path=f"src/App.{ext}",
                                  content=react_app(name, is_typescript)))
        files.append(ScaffoldFile(name=f"index.{ext}", path=f"src/index.{ext}",
                                  content=react_index(is_typescript)))
    elif framework == "express":
        files.append(ScaffoldFile(name=f"server.{ext}", path=f"src/server.{ext}",
                                  content=express_server(name, is_typescript)))
    else:
        files.append(ScaffoldFile(name=f"index.{ext}", path=f"src/index.{ext}",
                                  content=basic_index(name, is_typescript)))

    if is_typescript:
        files.append(ScaffoldFile(name="tsconfig.json", path="tsconfig.json", content=TSCONFIG))
    return files


def python_files(name: str, framework: Optional[str], template: str) -> List[ScaffoldFile]:
    return [
        ScaffoldFile(name="requirements.txt", path="requirements.txt",
                     content=python_requirements(framework)),
        ScaffoldFile(name="main.py", path="main.py", content=python_main(name, framework)),
    ]


def java_files(name: str, framework: Optional[str], template: str) -> List[ScaffoldFile]:
    class_name = re.sub(r"[^a-zA-Z0-9]", "", name)
    return [
        ScaffoldFile(name=f"{class_name}.java", path=f"src/main/java/{class_name}.java",
                     content=java_main(class_name)),
    ]


# ─────────────────────────────────────────────
# File bodies
# ─────────────────────────────────────────────

def readme(name: str, language: str, framework: Optional[str]) -> str:
    built_with = f" built with {framework}" if framework else ""
    return f"""# {name}

A {language} project{built_with} created with DevFlowHub.

## Getting Started

This project was scaffolded with DevFlowHub's AI-powered development environment.

## Development

Start coding in the `src/` directory.

## Features

- Modern development setup
- AI-powered assistance
- Real-time collaboration
- Integrated deployment

Happy coding! 🚀
"""


_GITIGNORE_COMMON = """# Dependencies
node_modules/
.env
.env.local
.env.development.local
.env.test.local
.env.production.local

# Logs
npm-debug.log*
yarn-debug.log*
yarn-error.log*

# Runtime data
pids
*.pid
*.seed
*.pid.lock

# Coverage directory used by tools like istanbul
coverage/

# nyc test coverage
.nyc_output

# Dependency directories
jspm_packages/

# Optional npm cache directory
.npm

# Optional REPL history
.node_repl_history

# Output of 'npm pack'
*.tgz

# Yarn Integrity file
.yarn-integrity

# IDE
.vscode/
.idea/
*.swp
*.swo

# OS
.DS_Store
Thumbs.db
"""

_GITIGNORE_PYTHON = """
# Python
__pycache__/
*.py[cod]
*$py.class
*.so
.Python
build/
develop-eggs/
dist/
downloads/
eggs/
.eggs/
lib/
lib64/
parts/
sdist/
var/
wheels/
*.egg-info/
.installed.cfg
*.egg
"""


def gitignore(language: str) -> str:
    if language.lower() == "python":
        return _GITIGNORE_COMMON + _GITIGNORE_PYTHON
    return _GITIGNORE_COMMON


def package_json(name: str, framework: Optional[str], is_typescript: bool) -> str:
    package = {
        "name": re.sub(r"\s+", "-", name.lower()),
        "version": "0.0.1",
        "description": f"A {framework or 'vanilla'} project created with DevFlowHub",
        "main": "src/index.js",
        "scripts": {
            "start": "node src/index.js",
            "dev": "node src/index.js",
            "build": "tsc" if is_typescript else 'echo "No build step needed"',
        },
        "keywords": ["devflowhub", "ai", "development"],
        "author": "DevFlowHub User",
        "license": "MIT",
    }

    if framework == "react":
        package["scripts"] = {
            "start": "react-scripts start",
            "build": "react-scripts build",
            "test": "react-scripts test",
            "eject": "react-scripts eject",
        }
    elif framework == "express":
        package["scripts"] = {
            "start": "node src/server.js",
            "dev": "nodemon src/server.js",
        }
    return json.dumps(package, indent=2)


def basic_index(name: str, is_typescript: bool) -> str:
    annotation = ": string" if is_typescript else ""
    return f"""// {name} - Main entry point
// Created with DevFlowHub

function main() {{
  const message{annotation} = "Welcome to {name}!";
  console.log(message);

  // Start coding here!
}}

main();
"""


def react_app(name: str, is_typescript: bool) -> str:
    annotation = ": React.FC" if is_typescript else ""
    return f"""import React from 'react';

const App{annotation} = () => {{
  return (
    <div className="App">
      <header className="App-header">
        <h1>Welcome to {name}</h1>
        <p>This React app was created with DevFlowHub</p>
      </header>
    </div>
  );
}};

export default App;
"""


def react_index(is_typescript: bool) -> str:
    root_lookup = "document.getElementById('root') as HTMLElement" if is_typescript \
        else "document.getElementById('root')"
    return f"""import React from 'react';
import ReactDOM from 'react-dom/client';
import App from './App';

const root = ReactDOM.createRoot(
  {root_lookup}
);

root.render(
  <React.StrictMode>
    <App />
  </React.StrictMode>
);
"""


def express_server(name: str, is_typescript: bool) -> str:
    return f"""const express = require('express');
const app = express();
const PORT = process.env.PORT || 3000;

app.get('/', (req, res) => {{
  res.json({{
    message: 'Welcome to {name}!',
    created: 'DevFlowHub'
  }});
}});

app.listen(PORT, () => {{
  console.log(`Server running on port ${{PORT}}`);
}});
"""


def python_main(name: str, framework: Optional[str]) -> str:
    return f'''#!/usr/bin/env python3
"""
{name} - Main entry point
Created with DevFlowHub
"""

def main():
    print("Welcome to {name}!")
    print("This Python project was created with DevFlowHub")

    # Start coding here!

if __name__ == "__main__":
    main()
'''


def python_requirements(framework: Optional[str]) -> str:
    base = "# Core dependencies\nrequests>=2.28.0\npython-dotenv>=0.19.0\n"
    if framework == "flask":
        return base + "flask>=2.0.0\nflask-cors>=3.0.0\n"
    if framework == "django":
        return base + "django>=4.0.0\ndjangorestframework>=3.13.0\n"
    return base


def java_main(class_name: str) -> str:
    return f"""public class {class_name} {{
    public static void main(String[] args) {{
        System.out.println("Welcome to {class_name}!");
        System.out.println("This Java project was created with DevFlowHub");

        // Start coding here!
    }}
}}
"""


TSCONFIG = """{
  "compilerOptions": {
    "target": "ES2020",
    "lib": ["ES2020", "DOM"],
    "module": "commonjs",
    "outDir": "./dist",
    "rootDir": "./src",
    "strict": true,
    "esModuleInterop": true,
    "skipLibCheck": true,
    "forceConsistentCasingInFileNames": true
  },
  "include": ["src/**/*"],
  "exclude": ["node_modules", "dist"]
}
"""
