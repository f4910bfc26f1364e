"""Tests for the command line interface."""

import json

from typer.testing import CliRunner

from ws_export.cli import app

runner = CliRunner()


class TestInfo:
    """Tests for the info command."""

    def test_info(self, navigation_path):
        result = runner.invoke(app, ["info", str(navigation_path)])
        assert result.exit_code == 0
        assert "Joseph Conrad" in result.output
        assert "Karain" in result.output

    def test_info_nested(self, navigation_path):
        result = runner.invoke(app, ["info", str(navigation_path), "--nested"])
        assert result.exit_code == 0

    def test_info_nested_with_title(self, tmp_path):
        """Subpages of the work are listed along with the nested summary."""
        page = tmp_path / "work.html"
        page.write_text(
            '<div id="ws-summary"><ul><li><a href="./W/A">Alpha</a>'
            '<ul><li><a href="./W/A/1">One</a></li></ul></li></ul></div>'
            '<p><a href="./W/Zeta">Zeta</a></p>',
            encoding="utf-8",
        )
        result = runner.invoke(app, ["info", str(page), "--nested", "--title", "W"])
        assert result.exit_code == 0
        assert "One" in result.output
        assert "Zeta" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["info", str(tmp_path / "missing.html")])
        assert result.exit_code != 0

    def test_invalid_config(self, navigation_path, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"metadata_keys": "ws-author"}))
        result = runner.invoke(app, ["info", str(navigation_path), "--config", str(config_path)])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestClean:
    """Tests for the clean command."""

    def test_clean_writes_normalized_content(self, navigation_path, tmp_path):
        output_path = tmp_path / "out.html"
        result = runner.invoke(app, ["clean", str(navigation_path), "-o", str(output_path)])
        assert result.exit_code == 0

        html = output_path.read_text(encoding="utf-8")
        assert 'data-title="PD-icon.svg-48px-PD-icon.svg.png"' in html
        assert 'style="margin: auto; border: 1px solid"' in html
        assert "ws-noexport" not in html
        assert 'id="toc"' not in html

    def test_clean_with_config(self, navigation_path, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"chrome_selectors": [".licenseContainer"]}))
        output_path = tmp_path / "out.html"
        result = runner.invoke(
            app,
            ["clean", str(navigation_path), "-o", str(output_path), "-c", str(config_path)],
        )
        assert result.exit_code == 0
        assert "data-title" not in output_path.read_text(encoding="utf-8")
