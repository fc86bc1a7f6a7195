"""Shared fixtures for the sitecontent test suite."""

import pytest
from flask_jwt_extended import create_access_token

from sitecontent import create_app
from sitecontent.extensions import db


PROJECTS_HTML = """<!DOCTYPE html>
<html>
<head><title>Projects</title></head>
<body>
  <nav class="navbar"><a href="/">Home</a><a href="/projects.html">Projects</a></nav>
  <section class="projects-intro">
    <h2>Our Projects</h2>
    <p>Community initiatives that keep the Tamil language alive across generations and continents.</p>
  </section>
  <section class="projects-list">
    <h2>Current Work</h2>
    <p>Digitising classic literature, running weekend schools and publishing children's books in Tamil.</p>
  </section>
</body>
</html>
"""


@pytest.fixture
def source_dir(tmp_path):
    """Directory holding static page markup."""
    return tmp_path


@pytest.fixture
def app(source_dir):
    app = create_app(
        "testing",
        overrides={"CONTENT_SOURCE_DIRS": [str(source_dir)]},
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers(app):
    token = create_access_token(identity="admin-1", additional_claims={"role": "admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def viewer_headers(app):
    token = create_access_token(identity="viewer-1", additional_claims={"role": "viewer"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def write_page(source_dir):
    """Write `<name>` under the source directory and return its path."""

    def _write(name, html):
        path = source_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(html, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def projects_page(write_page):
    return write_page("projects.html", PROJECTS_HTML)


@pytest.fixture
def home_page(write_page):
    return write_page("index.html", PROJECTS_HTML)
