"""CLI tests."""

from types import SimpleNamespace

from click.testing import CliRunner

from cjk_font_subsetter.cli import main as cli_main
from cjk_font_subsetter.core.errors import FetchError
from cjk_font_subsetter.pipeline import runner


def test_info(tiny_font):
    """Test info prints the font names."""
    result = CliRunner().invoke(cli_main.cli, ["info", str(tiny_font)])

    assert result.exit_code == 0
    assert "PostScript name: TestSans-Regular" in result.output
    assert "Family: Test Sans" in result.output


def test_subset_passes_options(tiny_font, tmp_path, monkeypatch):
    """Test subset builds options from flags and runs the pipeline."""
    seen = {}

    def fake_run_pipeline(options, source, subsetter):
        seen["options"] = options
        seen["subsetter"] = subsetter
        return SimpleNamespace(css_file=tmp_path / "out.css")

    monkeypatch.setattr(runner, "run_pipeline", fake_run_pipeline)

    result = CliRunner().invoke(
        cli_main.cli,
        [
            "subset",
            str(tiny_font),
            "-o",
            str(tmp_path / "out"),
            "--locale",
            "JP",
            "-f",
            "woff",
            "-f",
            "woff2",
            "--jobs",
            "3",
            "--engine",
            "fonttools",
            "--overwrite",
        ],
    )

    assert result.exit_code == 0, result.output
    options = seen["options"]
    assert options.locale.value == "jp"
    assert [f.value for f in options.formats] == ["woff", "woff2"]
    assert options.concurrency == 3
    assert options.overwrite is True
    assert type(seen["subsetter"]).__name__ == "FontToolsSubsetter"


def test_subset_failure_exit_code(tiny_font, tmp_path, monkeypatch):
    """Test pipeline errors exit with status 1."""

    def failing_run_pipeline(options, source, subsetter):
        raise FetchError("offline")

    monkeypatch.setattr(runner, "run_pipeline", failing_run_pipeline)

    result = CliRunner().invoke(
        cli_main.cli, ["subset", str(tiny_font), "-o", str(tmp_path / "out")]
    )
    assert result.exit_code == 1


def test_subset_missing_font(tmp_path):
    """Test a missing font file fails validation."""
    result = CliRunner().invoke(
        cli_main.cli, ["subset", str(tmp_path / "missing.ttf"), "-o", str(tmp_path)]
    )
    assert result.exit_code == 1


def test_invalid_locale_is_a_usage_error(tiny_font, tmp_path):
    """Test unsupported locales are rejected by the CLI."""
    result = CliRunner().invoke(
        cli_main.cli, ["subset", str(tiny_font), "-o", str(tmp_path), "--locale", "xx"]
    )
    assert result.exit_code == 2


def test_plan_lists_jobs(tiny_font, tmp_path, monkeypatch, fake_source):
    """Test plan prints every job without running the subsetter."""
    monkeypatch.setattr(cli_main, "make_source", lambda cache_dir, cache_ttl: fake_source)

    result = CliRunner().invoke(
        cli_main.cli, ["plan", str(tiny_font), "-o", str(tmp_path / "out")]
    )

    assert result.exit_code == 0, result.output
    assert "[0] U+4E00-9FFF" in result.output
    assert "[1] U+3400-4DBF" in result.output
    assert result.output.count("woff2:") == 2
    assert "TestSans-Regular_1.woff" in result.output
    assert not (tmp_path / "out").exists()


def test_timeout_with_fonttools_engine_warns(caplog):
    """Test an explicit timeout is reported as unused by the fontTools engine."""
    subsetter = cli_main.make_subsetter("fonttools", 30.0, timeout_given=True)

    assert type(subsetter).__name__ == "FontToolsSubsetter"
    assert "--timeout has no effect" in caplog.text


def test_default_timeout_with_fonttools_engine_is_silent(caplog):
    """Test no warning is logged when the timeout was not given."""
    cli_main.make_subsetter("fonttools", 600.0)
    assert "--timeout" not in caplog.text


def test_pyftsubset_engine_gets_timeout():
    """Test the timeout reaches the pyftsubset engine."""
    assert cli_main.make_subsetter("pyftsubset", 30.0, timeout_given=True).timeout == 30.0
