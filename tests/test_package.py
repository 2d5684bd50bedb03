import stache


def test_public_api_round_trip():
    """The top-level package exposes loaders and rendering."""
    loader = stache.HashMapLoader({"greet": "hello {{name}}!"})

    assert loader.render_to_string("greet", {"name": "world"}) == "hello world!"


def test_version_is_a_string():
    """__version__ comes from the installed distribution metadata."""
    assert isinstance(stache.__version__, str)
    assert stache.tool_version() == stache.__version__
