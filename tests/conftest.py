from pathlib import Path

import pytest

from stache.loaders import LoaderConfig

# Импорт из унифицированной инфраструктуры
from tests.infrastructure.file_utils import CountingReader, write_templates


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    """Директория с небольшим набором шаблонов, включая вложенные партиалы."""
    return write_templates(tmp_path / "templates", {
        "a": "A {{n}}",
        "b": "B {{n}}",
        "c": "C {{n}}",
        "page": "<h1>{{title}}</h1>\n{{>partials/list}}",
        "partials/list": "{{#items}}\n  <li>{{.}}</li>\n{{/items}}\n",
        "emails/welcome": "Welcome, {{user.name}}!",
    })


@pytest.fixture
def loader_config(templates_dir: Path) -> LoaderConfig:
    return LoaderConfig(templates_directory=templates_dir, cache_size=2)


@pytest.fixture
def counting_reader(templates_dir: Path) -> CountingReader:
    return CountingReader(templates_dir)
