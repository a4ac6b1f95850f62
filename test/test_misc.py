import pytest


def test_library_specifier():

    from neobuild.util import LibrarySpecifier

    with pytest.raises(ValueError):
        LibrarySpecifier.from_str("foo.bar:baz")

    spec = LibrarySpecifier.from_str("foo.bar:baz:0.1.0")
    assert spec.group == "foo.bar"
    assert spec.artifact == "baz"
    assert spec.version == "0.1.0"
    assert spec.classifier is None
    assert str(spec) == "foo.bar:baz:0.1.0"
    assert spec.file_path() == "foo/bar/baz/0.1.0/baz-0.1.0.jar"

    spec = LibrarySpecifier.from_str("foo.bar:baz:0.1.0:classifier@txt")
    assert spec.classifier == "classifier"
    assert spec.extension == "txt"
    assert str(spec) == "foo.bar:baz:0.1.0:classifier@txt"
    assert spec.file_name() == "baz-0.1.0-classifier.txt"
    assert spec.file_path() == "foo/bar/baz/0.1.0/baz-0.1.0-classifier.txt"


def test_library_specifier_bracketed():

    from neobuild.util import LibrarySpecifier

    spec = LibrarySpecifier.from_bracketed("[com.example:foo:1.0:client@zip]")
    assert spec.file_path() == "com/example/foo/1.0/foo-1.0-client.zip"

    spec = LibrarySpecifier.from_bracketed("[com.example:foo:1.0:client]")
    assert spec.extension == "jar"
    assert spec.file_path() == "com/example/foo/1.0/foo-1.0-client.jar"

    for invalid in ("com.example:foo:1.0:client", "[com.example:foo:1.0]", "'1.21.1'", "/data/client.lzma", "[]"):
        with pytest.raises(ValueError):
            LibrarySpecifier.from_bracketed(invalid)


def test_manifest_accessors():

    from neobuild.util import expect_dict, expect_list, expect_str, ManifestTypeError

    assert expect_dict({"a": 1}, "/") == {"a": 1}
    assert expect_list([1], "/") == [1]
    assert expect_str("foo", "/") == "foo"

    with pytest.raises(ManifestTypeError) as error:
        expect_list({"libraries": None}, "version.json: /libraries")
    assert error.value.path == "version.json: /libraries"
    assert error.value.actual == "dict"
    assert str(error.value) == "version.json: /libraries must be an array, got dict"

    # Manifest type errors are value errors, like JSON decoding errors.
    with pytest.raises(ValueError):
        expect_str(None, "/id")


def test_json_file(tmp_path):

    from neobuild.util import read_json_file, write_json_file

    path = tmp_path / "doc.json"
    write_json_file(path, {"libraries": [{"name": "foo:bar:1"}], "unknown": {"kept": True}})

    assert path.read_text().startswith("{\n  \"libraries\": [")
    assert read_json_file(path) == {"libraries": [{"name": "foo:bar:1"}], "unknown": {"kept": True}}


def test_version_sort_key():

    from neobuild.util import version_sort_key

    assert version_sort_key("21.1.9") < version_sort_key("21.1.10")
    assert version_sort_key("21.1.100") > version_sort_key("21.1.99")
    assert version_sort_key("20.4.80-beta") < version_sort_key("20.4.81-beta")
    assert version_sort_key("20.6.1") > version_sort_key("20.4.237")

    versions = ["21.1.10", "21.1.2", "21.0.167", "21.1.1"]
    assert sorted(versions, key=version_sort_key) == ["21.0.167", "21.1.1", "21.1.2", "21.1.10"]


def test_format_number():

    from neobuild.cli.util import format_number

    assert format_number(0) == "0 "
    assert format_number(999) == "999 "
    assert format_number(1000) == "1.0 k"
    assert format_number(999999) == "999.9 k"
    assert format_number(1000000) == "1.0 M"
    assert format_number(1000000000) == "1.0 G"


def test_http_error():

    from neobuild.http import HttpResponse, HttpError

    error = HttpError(HttpResponse(404, b""), "GET", "https://maven.test/a.jar", ValueError("not found"))
    assert str(error) == "GET https://maven.test/a.jar: status 404"

    error = HttpError(HttpResponse(0, b""), "GET", "https://maven.test/a.jar", OSError("unreachable"))
    assert str(error) == "GET https://maven.test/a.jar: unreachable"

    assert HttpResponse(200, b'{"latest": "21.1.77"}').json() == {"latest": "21.1.77"}


def test_library_specifier_bracketed_extra_parts():

    from neobuild.util import LibrarySpecifier

    spec = LibrarySpecifier.from_bracketed("[com.example:foo:1.0:client:extra]")
    assert spec.classifier == "client"
    assert spec.file_path() == "com/example/foo/1.0/foo-1.0-client.jar"

    spec = LibrarySpecifier.from_bracketed("[net.minecraft:client:1.21.1-20240808.144430:mappings@txt:extra]")
    assert spec.file_path() == "net/minecraft/client/1.21.1-20240808.144430/client-1.21.1-20240808.144430-mappings.txt"

    with pytest.raises(ValueError):
        LibrarySpecifier.from_bracketed("[com.example:foo:1.0:@zip]")


def test_version_sort_key_pre_release():

    from neobuild.util import version_sort_key

    assert version_sort_key("21.1.1-beta") < version_sort_key("21.1.1")
    assert version_sort_key("21.1.1") < version_sort_key("21.1.2-beta")
    assert version_sort_key("21.1") < version_sort_key("21.1.1")

    versions = ["20.4.237", "20.6.1-beta", "20.6.1", "20.6.2-beta"]
    assert sorted(versions, key=version_sort_key) == versions
