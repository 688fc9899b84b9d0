"""Shared fixtures: a realistic project template on disk and in memory."""

import json
from pathlib import Path

import pytest

from templateclean.fs import MemoryFilesystem

README = """# AngularVibeCoding

Modern Angular starter.

## 🚀 Key Features

- Standalone components
- Signals
"""

MANIFEST = {
    "name": "angularvibecoding",
    "version": "0.0.0",
    "scripts": {
        "ng": "ng",
        "start": "ng serve",
        "clean-template": "python scripts/clean_template.py",
        "clean-template:dashboard": "python scripts/clean_template_dashboard.py",
        "clean-template:blank": "python scripts/clean_template_blank.py",
        "build": "ng build",
        "test": "ng test",
    },
    "private": True,
    "dependencies": {"@angular/core": "^20.0.0"},
}

SCAFFOLD_FILES = {
    "src/app/app.ts": "export class App {}\n",
    "src/app/app.html": "<app-layout />\n",
    "src/app/app.routes.ts": "import { authGuard } from './auth/guards/auth-guard';\n",
    "src/app/auth/login/login.ts": "export class Login {}\n",
    "src/app/auth/login/login.html": "<form></form>\n",
    "src/app/auth/register/register.ts": "export class Register {}\n",
    "src/app/auth/services/auth.ts": "export class Auth {}\n",
    "src/app/auth/guards/auth-guard.ts": "export const authGuard = () => true;\n",
    "src/app/data/users/users.ts": "export class Users {}\n",
    "src/app/data/users/mock/users.json": "[]\n",
    "src/app/shared/example-component/example-component.ts": "export class ExampleComponent {}\n",
    "src/app/shared/notification/notification-ui.ts": "export class NotificationUi {}\n",
    "src/app/shared/services/notification.ts": "export class Notification {}\n",
    "src/app/home/home.ts": "export class Home {}\n",
    "src/app/core/home/home.ts": "export class Home { demo = true; }\n",
    "src/app/core/home/home.html": "<h1>Demo home</h1>\n",
    "src/app/core/home/home.scss": ".demo { color: red; }\n",
    "src/app/core/header/header.ts": "import { Auth } from '../../auth/services/auth';\n",
    "src/app/core/header/header.html": "<header>login</header>\n",
    "src/app/core/header/header.scss": "",
    "src/app/core/sidenav/sidenav.ts": "export class Sidenav { login = true; }\n",
    "src/app/core/footer/footer.ts": "export class Footer {}\n",
    "src/app/core/layout/layout.ts": "export class Layout {}\n",
    "src/app/core/not-found/not-found.ts": "export class NotFound {}\n",
    "scripts/clean_template.py": "from templateclean.cli import app\n\napp()\n",
    "scripts/clean_template_dashboard.py": "from templateclean.cli import app\n\napp(['dashboard'])\n",
    "scripts/clean_template_blank.py": "from templateclean.cli import app\n\napp(['blank'])\n",
    "scripts/README.md": "# Cleanup scripts\n",
    "README.md": README,
    "package.json": json.dumps(MANIFEST, indent=2) + "\n",
}


@pytest.fixture
def scaffold(tmp_path: Path) -> Path:
    """Write the template tree under tmp_path and return its root."""
    root = tmp_path / "scaffold"
    for relative, content in SCAFFOLD_FILES.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def memory_root() -> Path:
    return Path("/scaffold")


@pytest.fixture
def memory_fs(memory_root: Path) -> MemoryFilesystem:
    fs = MemoryFilesystem()
    for relative, content in SCAFFOLD_FILES.items():
        fs.add_file(memory_root / relative, content)
    return fs
