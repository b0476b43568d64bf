"""End-to-end tests for TranslationManager over real files in tmp_path."""

import json

import pytest

from langbly_sync.config import ConfigError, PipelineConfig
from langbly_sync.exceptions import PermanentServiceError, PipelineError
from langbly_sync.formats import parse_yaml
from langbly_sync.translation.manager import TranslationManager

from tests.conftest import FakeClient


def write(path, content):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def make_config(tmp_path, files, targets=("fr",), pattern="locales/{lang}.json", **kwargs):
    return PipelineConfig(
        source_language="en",
        target_languages=list(targets),
        files=[str(f) for f in files],
        output_pattern=str(tmp_path / pattern),
        **kwargs,
    )


def test_json_file_is_translated_and_written(tmp_path, fake_client, app_config):
    source = write(tmp_path / "locales/en.json", '{\n    "nav": {"home": "Home", "about": "About"},\n    "count": 2\n}\n')
    config = make_config(tmp_path, [source])

    result = TranslationManager(config, app_config, client=fake_client).translate_files()

    output = (tmp_path / "locales/fr.json").read_text(encoding="utf-8")
    assert json.loads(output) == {"nav": {"home": "[fr] Home", "about": "[fr] About"}, "count": 2}
    assert output.startswith('{\n    "nav"')
    assert output.endswith("}\n")
    assert result.files_translated == 1
    assert result.characters_used == len("Home") + len("About")
    assert fake_client.calls[0]["source"] == "en"


def test_only_missing_keys_are_sent(tmp_path, fake_client, app_config):
    source = write(tmp_path / "locales/en.json", json.dumps({"nav": {"home": "Home", "about": "About"}}))
    write(tmp_path / "locales/fr.json", json.dumps({"nav": {"home": "Accueil"}}))
    config = make_config(tmp_path, [source])

    result = TranslationManager(config, app_config, client=fake_client).translate_files()

    assert fake_client.calls == [{"texts": ["About"], "target": "fr", "source": "en", "format": None}]
    output = json.loads((tmp_path / "locales/fr.json").read_text(encoding="utf-8"))
    assert output == {"nav": {"home": "Accueil", "about": "[fr] About"}}
    assert result.characters_used == len("About")


def test_second_run_is_skipped(tmp_path, fake_client, app_config):
    source = write(tmp_path / "locales/en.json", json.dumps({"a": "A", "b": "B"}))
    config = make_config(tmp_path, [source])
    manager = TranslationManager(config, app_config, client=fake_client)

    manager.translate_files()
    first_output = (tmp_path / "locales/fr.json").read_text(encoding="utf-8")
    second = manager.translate_files()

    assert second.files_translated == 0
    assert second.characters_used == 0
    assert len(fake_client.calls) == 1
    assert (tmp_path / "locales/fr.json").read_text(encoding="utf-8") == first_output


def test_placeholders_survive_translation(tmp_path, fake_client, app_config):
    client = fake_client
    source = write(tmp_path / "locales/en.json", json.dumps({"greet": "Hello {name}, %d new"}))
    config = make_config(tmp_path, [source])

    TranslationManager(config, app_config, client=client).translate_files()

    assert client.calls[0]["texts"] == ["Hello __PH0__, __PH1__ new"]
    output = json.loads((tmp_path / "locales/fr.json").read_text(encoding="utf-8"))
    assert output == {"greet": "[fr] Hello {name}, %d new"}


def test_yaml_file_is_translated(tmp_path, fake_client, app_config):
    source = write(tmp_path / "i18n/en.yml", "nav:\n  home: Home\nlimit: 10\n")
    config = make_config(tmp_path, [source], pattern="i18n/{lang}.yml")

    result = TranslationManager(config, app_config, client=fake_client).translate_files()

    assert (tmp_path / "i18n/fr.yml").read_text(encoding="utf-8") == "nav:\n  home: '[fr] Home'\nlimit: 10\n"
    assert result.files_translated == 1


def test_yaml_yes_no_values_and_keys_are_translated(tmp_path, fake_client, app_config):
    source = write(tmp_path / "i18n/en.yml", "title: Confirm\nanswer: Yes\nno: Norwegian\n")
    config = make_config(tmp_path, [source], pattern="i18n/{lang}.yml")

    result = TranslationManager(config, app_config, client=fake_client).translate_files()

    output = (tmp_path / "i18n/fr.yml").read_text(encoding="utf-8")
    assert parse_yaml(output) == {"title": "[fr] Confirm", "answer": "[fr] Yes", "no": "[fr] Norwegian"}
    assert "False" not in output
    assert "true" not in output
    assert fake_client.calls[0]["texts"] == ["Confirm", "Yes", "Norwegian"]
    assert result.files_translated == 1


def test_yaml_with_only_yes_no_on_values_is_not_skipped(tmp_path, fake_client, app_config):
    source = write(tmp_path / "i18n/en.yml", "yes: Yes\nno: No\nmode: On\n")
    config = make_config(tmp_path, [source], pattern="i18n/{lang}.yml")

    result = TranslationManager(config, app_config, client=fake_client).translate_files()

    assert result.files_translated == 1
    assert parse_yaml((tmp_path / "i18n/fr.yml").read_text(encoding="utf-8")) == {
        "yes": "[fr] Yes",
        "no": "[fr] No",
        "mode": "[fr] On",
    }


def test_markdown_body_translated_frontmatter_kept(tmp_path, fake_client, app_config):
    source = write(tmp_path / "docs/en/guide.md", "---\ntitle: Guide\n---\n# Hello {name}\n")
    config = make_config(tmp_path, [source], targets=["de"], pattern="docs/{lang}/**/*.md")

    result = TranslationManager(config, app_config, client=fake_client).translate_files()

    output = (tmp_path / "docs/de/guide.md").read_text(encoding="utf-8")
    assert output == "---\ntitle: Guide\n---[de] \n# Hello {name}\n"
    assert fake_client.calls[0]["format"] == "html"
    assert fake_client.calls[0]["texts"] == ["\n# Hello {name}\n"]
    assert result.characters_used == len("\n# Hello {name}\n")


def test_markdown_with_empty_body_is_skipped(tmp_path, fake_client, app_config):
    source = write(tmp_path / "docs/en/empty.md", "---\ntitle: Empty\n---\n   \n")
    config = make_config(tmp_path, [source], pattern="docs/{lang}/**/*.md")

    result = TranslationManager(config, app_config, client=fake_client).translate_files()

    assert result.files_translated == 0
    assert fake_client.calls == []


def test_dry_run_counts_characters_without_writing(tmp_path, app_config):
    source = write(tmp_path / "locales/en.json", json.dumps({"a": "Hello", "b": "World!"}))
    config = make_config(tmp_path, [source], targets=["fr", "de"], dry_run=True)

    # No client and no API key: a dry run must never touch the service
    app_config["langbly"]["api_key"] = ""
    result = TranslationManager(config, app_config).translate_files()

    assert result.files_translated == 0
    assert result.characters_used == 2 * len("HelloWorld!")
    assert not (tmp_path / "locales/fr.json").exists()


def test_source_language_and_duplicates_are_dropped(tmp_path, fake_client, app_config):
    source = write(tmp_path / "locales/en.json", json.dumps({"a": "A"}))
    config = make_config(tmp_path, [source], targets=["fr", " fr ", "en", "de"])

    result = TranslationManager(config, app_config, client=fake_client).translate_files()

    assert sorted(call["target"] for call in fake_client.calls) == ["de", "fr"]
    assert result.files_translated == 2


def test_unparseable_target_is_retranslated(tmp_path, fake_client, app_config):
    source = write(tmp_path / "locales/en.json", json.dumps({"a": "A"}))
    write(tmp_path / "locales/fr.json", "{broken")
    config = make_config(tmp_path, [source])

    result = TranslationManager(config, app_config, client=fake_client).translate_files()

    assert result.files_translated == 1
    assert json.loads((tmp_path / "locales/fr.json").read_text(encoding="utf-8")) == {"a": "[fr] A"}


def test_malformed_source_raises_with_context(tmp_path, fake_client, app_config):
    source = write(tmp_path / "locales/en.json", "{not json")
    config = make_config(tmp_path, [source])

    with pytest.raises(PipelineError) as exc_info:
        TranslationManager(config, app_config, client=fake_client).translate_files()

    assert exc_info.value.source_file == str(source)
    assert exc_info.value.language == "fr"


def test_fail_fast_raises_first_service_error(tmp_path, app_config):
    client = FakeClient(fail_on="de", error=PermanentServiceError("Langbly API error (400): bad", status_code=400))
    source = write(tmp_path / "locales/en.json", json.dumps({"a": "A"}))
    config = make_config(tmp_path, [source], targets=["de", "fr"])

    with pytest.raises(PipelineError) as exc_info:
        TranslationManager(config, app_config, client=client).translate_files()

    assert isinstance(exc_info.value.cause, PermanentServiceError)
    assert "bad" in str(exc_info.value)
    assert not (tmp_path / "locales/fr.json").exists()


def test_failures_are_collected_without_fail_fast(tmp_path, app_config):
    app_config["translation"]["fail_fast"] = False
    client = FakeClient(fail_on="de", error=PermanentServiceError("Langbly API error (400): bad", status_code=400))
    source = write(tmp_path / "locales/en.json", json.dumps({"a": "A"}))
    config = make_config(tmp_path, [source], targets=["de", "fr"])

    result = TranslationManager(config, app_config, client=client).translate_files()

    assert result.files_translated == 1
    assert result.failed_items == [
        {"file": str(source), "language": "de", "error": "Langbly API error (400): bad"}
    ]
    assert not result.success
    assert (tmp_path / "locales/fr.json").exists()


def test_cancel_stops_before_writing(tmp_path, fake_client, app_config):
    source = write(tmp_path / "locales/en.json", json.dumps({"a": "A"}))
    config = make_config(tmp_path, [source], targets=["fr", "de"])

    result = TranslationManager(config, app_config, client=fake_client).translate_files(cancel_check=lambda: True)

    assert result.cancelled
    assert result.files_translated == 0
    assert fake_client.calls == []


def test_cancel_between_batches_writes_nothing(tmp_path, fake_client, app_config):
    app_config["translation"]["max_batch_items"] = 1
    source = write(tmp_path / "locales/en.json", json.dumps({"a": "A", "b": "B", "c": "C"}))
    config = make_config(tmp_path, [source])

    result = TranslationManager(config, app_config, client=fake_client).translate_files(
        cancel_check=lambda: len(fake_client.calls) >= 1
    )

    assert len(fake_client.calls) == 1
    assert fake_client.calls[0]["texts"] == ["A"]
    assert result.cancelled
    assert result.files_translated == 0
    assert not (tmp_path / "locales/fr.json").exists()


def test_parallel_workers_sum_totals(tmp_path, fake_client, app_config):
    app_config["translation"]["max_workers"] = 4
    files = [write(tmp_path / f"locales/{name}/en.json", json.dumps({"k": name})) for name in ("app", "admin")]
    config = make_config(tmp_path, files, targets=["fr", "de", "es"], pattern="out/{lang}/**/*.json")

    result = TranslationManager(config, app_config, client=fake_client).translate_files()

    assert result.files_translated == 6
    assert result.characters_used == 3 * (len("app") + len("admin"))
    assert json.loads((tmp_path / "out/es/admin/en.json").read_text(encoding="utf-8")) == {"k": "[es] admin"}


def test_progress_callback_receives_phases(tmp_path, fake_client, app_config):
    source = write(tmp_path / "locales/en.json", json.dumps({"a": "A"}))
    config = make_config(tmp_path, [source])
    phases = []

    TranslationManager(config, app_config, client=fake_client).translate_files(
        progress_callback=lambda progress: phases.append(progress.phase)
    )

    assert phases == ["checking", "batch_done", "written"]


def test_pr_hook_called_only_when_files_written(tmp_path, fake_client, app_config):
    source = write(tmp_path / "locales/en.json", json.dumps({"a": "A"}))
    config = make_config(tmp_path, [source], create_pr=True)
    calls = []
    manager = TranslationManager(config, app_config, client=fake_client, pr_hook=calls.append)

    manager.translate_files()
    manager.translate_files()

    assert calls == [["fr"]]


def test_invalid_pattern_is_rejected(tmp_path, app_config):
    config = PipelineConfig("en", ["fr"], ["a.json"], str(tmp_path / "locales/out.json"))
    with pytest.raises(ConfigError):
        TranslationManager(config, app_config)
