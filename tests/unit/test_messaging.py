import json

from pysym.common.messaging.bus import MessageBus
from pysym.needle import L, Needle, SemanticPointer
from pysym.test_utils import SpyBus


class RecordingRenderer:
    def __init__(self):
        self.calls = []

    def render(self, message, level):
        self.calls.append((level, message))


def _write_catalog(root, lang, data):
    target = root / "needle" / lang
    target.mkdir(parents=True)
    (target / "messages.json").write_text(json.dumps(data))


def test_pointer_builds_dotted_ids():
    assert str(L.rename.conflict.global_local) == "rename.conflict.global_local"
    assert L.a.b == "a.b"
    assert (L.cli / "option") == L.cli.option
    assert isinstance(L.x, SemanticPointer)


def test_needle_falls_back_to_default_language_then_key(tmp_path, monkeypatch):
    assets = tmp_path / "assets"
    _write_catalog(assets, "en", {"greet": "hello {name}"})
    monkeypatch.setenv("PYSYM_LANG", "fr")

    needle = Needle(asset_roots=[assets], project_root=tmp_path)

    assert needle.get(L.greet) == "hello {name}"
    assert needle.get(L.missing.key) == "missing.key"


def test_project_overrides_win(tmp_path):
    assets = tmp_path / "assets"
    _write_catalog(assets, "en", {"greet": "hello"})
    _write_catalog(tmp_path / ".pysym", "en", {"greet": "hi"})

    needle = Needle(asset_roots=[assets], project_root=tmp_path)

    assert needle.get(L.greet, lang="en") == "hi"


def test_malformed_catalog_is_skipped(tmp_path):
    assets = tmp_path / "assets"
    target = assets / "needle" / "en"
    target.mkdir(parents=True)
    (target / "broken.json").write_text("{not json")
    (target / "good.json").write_text(json.dumps({"ok": "fine"}))

    needle = Needle(asset_roots=[assets], project_root=tmp_path)

    assert needle.get(L.ok, lang="en") == "fine"


def test_bus_formats_templates(tmp_path):
    assets = tmp_path / "assets"
    _write_catalog(assets, "en", {"greet": "hello {name}", "bad": "{missing}"})
    bus = MessageBus(needle=Needle(asset_roots=[assets], project_root=tmp_path))
    renderer = RecordingRenderer()
    bus.set_renderer(renderer)

    bus.warning(L.greet, name="world")
    bus.error(L.bad)

    assert renderer.calls == [
        ("warning", "hello world"),
        ("error", "<formatting_error for 'bad'>"),
    ]


def test_bus_without_renderer_is_silent(tmp_path):
    bus = MessageBus(needle=Needle(asset_roots=[], project_root=tmp_path))
    bus.info(L.anything)


def test_packaged_catalog_has_rename_messages():
    from pysym.common import pysym_needle

    text = pysym_needle.get(L.rename.conflict.global_local, lang="en")
    assert text != "rename.conflict.global_local"
    assert "{glob" in text


def test_spy_bus_captures_ids(monkeypatch):
    from pysym.common import bus

    spy = SpyBus()
    with spy.patch(monkeypatch):
        bus.error(L.package.not_found, package="nowhere")

    spy.assert_id_called(L.package.not_found, level="error")
    assert spy.get_messages()[0]["params"] == {"package": "nowhere"}
