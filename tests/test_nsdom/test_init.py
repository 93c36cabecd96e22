"""Test module for nsdom package initialization."""


def test_package_import() -> None:
    """Test that the package can be imported successfully."""
    # Arrange & Act
    import nsdom

    # Assert
    assert nsdom is not None


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    # Arrange & Act
    import nsdom

    # Assert
    assert isinstance(nsdom.__version__, str)
    assert nsdom.__version__ == "0.1.0"


def test_package_all_exports_resolve() -> None:
    """Test that every name in __all__ is importable from the package."""
    # Arrange & Act
    import nsdom

    # Assert
    missing = [name for name in nsdom.__all__ if not hasattr(nsdom, name)]
    assert missing == []


def test_top_level_round_trip() -> None:
    """Test the simplest parse and serialize path through the package root."""
    # Arrange
    import nsdom

    # Act
    document = nsdom.parse_string('<a xmlns="urn:a"><b/></a>')

    # Assert
    assert isinstance(document, nsdom.Document)
    assert nsdom.to_string(document.get_root_element()) == '<a xmlns="urn:a"><b/></a>'
