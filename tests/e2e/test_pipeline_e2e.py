"""End-to-end tests running the localization pipeline against a live host."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from fontlocal.cache import StylesheetCache
from fontlocal.cli.app import cli
from fontlocal.config import load_settings
from fontlocal.localizer import DownloadError, LocalizationPipeline, PipelineState
from fontlocal.models import CHROME_USER_AGENT, CustomFont, Settings


def _font_path(font_dir: Path, host, slug: str, weight: int) -> Path:
    netloc = f"{host.host}:{host.port}"
    return font_dir / netloc / "s" / slug / "v1" / f"{slug}-{weight}.woff2"


class TestGenerate:
    """Test single stylesheet localization."""

    @pytest.mark.e2e
    @pytest.mark.asyncio
    async def test_unknown_family_uses_downloaded_metrics(
        self, font_host, tmp_path: Path
    ):
        """Test metrics of an unlisted family are read from the font file."""
        pipeline = LocalizationPipeline(tmp_path, "/fonts")

        css = await pipeline.generate(
            font_host.stylesheet_url("Test Sans"), "Test Sans", ["Arial"]
        )

        font = _font_path(tmp_path, font_host, "testsans", 400)
        assert font.read_bytes().startswith(b"wOF2")
        assert f"url(/fonts/{font_host.host}:{font_host.port}/s/testsans/" in css
        assert font_host.base_url not in css
        assert 'font-family: "Test Sans fallback";' in css
        assert "ascent-override: 90%;" in css
        assert "descent-override: 25%;" in css
        assert pipeline.state is PipelineState.DONE

    @pytest.mark.e2e
    @pytest.mark.asyncio
    async def test_rerun_is_served_from_cache(
        self, font_host, tmp_path: Path
    ):
        """Test the second run makes no requests at all."""
        href = font_host.stylesheet_url("Inter:wght@400;700")
        pipeline = LocalizationPipeline(tmp_path)

        first = await pipeline.generate(href, "Inter", ["Helvetica"])
        requests = len(font_host.hits)
        second = await pipeline.generate(href, "Inter", ["Helvetica"])

        assert requests == 3
        assert len(font_host.hits) == requests
        assert first == second
        assert "ascent-override: 96.875%;" in first

    @pytest.mark.e2e
    @pytest.mark.asyncio
    async def test_missing_font_fails_without_cache(
        self, font_host, tmp_path: Path
    ):
        """Test a 404 font ends the run in FAILED and caches nothing."""
        font_host.app.config["MISSING_FONTS"].add("inter")
        href = font_host.stylesheet_url("Inter")
        pipeline = LocalizationPipeline(tmp_path)

        with pytest.raises(DownloadError, match="HTTP 404"):
            await pipeline.generate(href, "Inter", ["Arial"])

        assert pipeline.state is PipelineState.FAILED
        assert StylesheetCache(tmp_path).entries() == []


class TestBuild:
    """Test bundle localization from a settings file."""

    @pytest.mark.e2e
    @pytest.mark.asyncio
    async def test_build_bundle(self, font_host, tmp_path: Path):
        """Test several stylesheets become one self-hosted stylesheet."""
        settings = Settings(
            font_directory=str(tmp_path),
            stylesheets=[
                font_host.stylesheet_url("Inter"),
                font_host.stylesheet_url("Roboto"),
            ],
            fonts=[
                CustomFont(family="Inter", fallbacks=["Helvetica"]),
                CustomFont(family="Poppins"),
            ],
            default_fallbacks=["Arial"],
        )
        pipeline = LocalizationPipeline.from_settings(settings)

        css = await pipeline.build(settings)

        assert _font_path(tmp_path, font_host, "inter", 400).is_file()
        assert _font_path(tmp_path, font_host, "roboto", 400).is_file()
        assert css.count("@font-face") == 5
        assert '"Poppins fallback";\n  src: local("Arial");' in css
        assert font_host.app.config["USER_AGENTS"] == [CHROME_USER_AGENT] * 2


class TestCli:
    """Test the command-line interface against the live host."""

    @pytest.mark.e2e
    def test_generate_command(self, font_host, tmp_path: Path):
        """Test generate writes the localized stylesheet."""
        output = tmp_path / "fonts.css"
        result = CliRunner().invoke(
            cli,
            [
                "generate",
                font_host.stylesheet_url("Inter"),
                "--family",
                "Inter",
                "--fallback",
                "Arial",
                "--font-dir",
                str(tmp_path / "fonts"),
                "--mount-prefix",
                "/assets/fonts",
                "-o",
                str(output),
            ],
        )

        assert result.exit_code == 0, result.output
        css = output.read_text()
        assert "url(/assets/fonts/" in css
        assert 'local("Arial")' in css
        assert len(StylesheetCache(tmp_path / "fonts").entries()) == 1

    @pytest.mark.e2e
    def test_missing_stylesheet(self, font_host, tmp_path: Path):
        """Test an unknown stylesheet exits with a fetch error."""
        font_host.app.config["MISSING_FAMILIES"].add("Nope")

        result = CliRunner().invoke(
            cli,
            [
                "generate",
                font_host.stylesheet_url("Nope"),
                "--family",
                "Nope",
                "--font-dir",
                str(tmp_path),
            ],
        )

        assert result.exit_code == 1
        assert "Fetch error" in result.output
        assert "Could not fetch the following stylesheet URL" in result.output

    @pytest.mark.e2e
    def test_config_init_then_build(
        self, font_host, tmp_path: Path
    ):
        """Test a settings file edited after config init drives build."""
        runner = CliRunner()
        config_path = tmp_path / "fontlocal.yaml"
        init = runner.invoke(cli, ["config", "init", "--config", str(config_path)])
        assert init.exit_code == 0

        settings = load_settings(config_path).model_copy(
            update={
                "font_directory": str(tmp_path / "public"),
                "output": str(tmp_path / "public" / "generated.css"),
                "stylesheets": [font_host.stylesheet_url("Lato")],
            }
        )
        settings.to_yaml_file(config_path)

        result = runner.invoke(cli, ["build", "--config", str(config_path)])

        assert result.exit_code == 0, result.output
        css = (tmp_path / "public" / "generated.css").read_text()
        assert '"Lato fallback"' in css
        assert '"Inter fallback";\n  src: local("Helvetica"), local("Arial");' in css
