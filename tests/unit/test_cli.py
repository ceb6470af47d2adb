"""Tests for the ``imobcrm`` command-line entry-point."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from pydantic_settings import SettingsConfigDict

from imobcrm.__main__ import build_parser, main
from imobcrm.core.settings import Settings
from imobcrm.storage.database import open_db
from imobcrm.storage.gateway import PUBLISHING_LOGS, PUBLISHING_RESULTS
from imobcrm.storage.sqlite_gateway import SqliteDatastore
from tests.conftest import make_property

_CONTACT_ARGS = [
    "--contact-name",
    "Ana Souza",
    "--contact-phone",
    "11987654321",
    "--contact-email",
    "ana@imob.com.br",
]


def _write_property(tmp_path: Path, **overrides: object) -> Path:
    path = tmp_path / "imovel.json"
    path.write_text(make_property(**overrides).model_dump_json(), encoding="utf-8")
    return path


def _exit_code(argv: list[str]) -> int | str | None:
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    return excinfo.value.code


async def _count_rows(db_path: Path) -> tuple[int, int]:
    conn = await open_db(db_path)
    try:
        datastore = SqliteDatastore(conn)
        logs = await datastore.select(PUBLISHING_LOGS)
        results = await datastore.select(PUBLISHING_RESULTS)
    finally:
        await conn.close()
    return len(logs), len(results)


@pytest.fixture()
def sim_env(clean_env: None, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Instant, always-successful simulation backed by a temp SQLite file."""
    db_path = tmp_path / "crm.db"
    monkeypatch.setenv("DATABASE_PATH", str(db_path))
    monkeypatch.setenv("PUBLISH_LATENCY_MIN_S", "0")
    monkeypatch.setenv("PUBLISH_LATENCY_MAX_S", "0")
    for platform in ("OLX", "ZAPIMOVEIS", "VIVAREAL"):
        monkeypatch.setenv(f"{platform}_SUCCESS_RATE", "1.0")
    return db_path


class TestParser:
    def test_publish_defaults(self) -> None:
        args = build_parser().parse_args(["publish", "p.json", *_CONTACT_ARGS])
        assert args.platforms is None
        assert args.no_price is False and args.no_photos is False
        assert args.seed is None

    def test_unknown_platform_rejected(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(
                ["publish", "p.json", "--platform", "imovelweb", *_CONTACT_ARGS]
            )


class TestValidateCommand:
    def test_valid_property(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert _exit_code(["validate", str(_write_property(tmp_path))]) == 0
        assert "Imóvel pronto para publicação." in capsys.readouterr().out

    def test_invalid_property(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = _write_property(tmp_path, sale_price=0, photos=[])

        assert _exit_code(["validate", str(path)]) == 1

        out = capsys.readouterr().out
        assert "Erro na validação:" in out
        assert "- Preço de venda deve ser maior que zero" in out
        assert "- Pelo menos uma foto é obrigatória" in out

    def test_missing_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert _exit_code(["validate", str(tmp_path / "nope.json")]) == 1
        assert "cannot read" in capsys.readouterr().err

    def test_malformed_json(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        assert _exit_code(["validate", str(path)]) == 1


class TestPublishCommand:
    def test_publish_all(
        self, sim_env: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        argv = ["publish", str(_write_property(tmp_path)), *_CONTACT_ARGS, "--seed", "7"]

        assert _exit_code(argv) == 0

        out = capsys.readouterr().out
        assert "✓ OLX:" in out
        assert "✓ ZapImóveis:" in out
        assert "✓ VivaReal:" in out
        assert out.count("Ver anúncio:") == 3
        assert asyncio.run(_count_rows(sim_env)) == (1, 3)

    def test_publish_selected_platforms(
        self, sim_env: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        argv = [
            "publish",
            str(_write_property(tmp_path)),
            "--platform",
            "vivareal",
            "--platform",
            "olx",
            *_CONTACT_ARGS,
        ]

        assert _exit_code(argv) == 0

        out = capsys.readouterr().out
        lines = [line for line in out.splitlines() if line.startswith(("✓", "✗"))]
        assert [line.split(":")[0] for line in lines] == ["✓ VivaReal", "✓ OLX"]

    def test_invalid_property_not_published(
        self, sim_env: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = _write_property(tmp_path, title="Casa")

        assert _exit_code(["publish", str(path), *_CONTACT_ARGS]) == 1

        assert "Título deve ter pelo menos" in capsys.readouterr().out
        assert asyncio.run(_count_rows(sim_env)) == (0, 0)

    def test_blank_contact_is_config_error(self, sim_env: Path, tmp_path: Path) -> None:
        argv = [
            "publish",
            str(_write_property(tmp_path)),
            "--contact-name",
            "  ",
            "--contact-phone",
            "11987654321",
            "--contact-email",
            "ana@imob.com.br",
        ]
        assert _exit_code(argv) == 1


class TestCardCommands:
    def test_property_card_with_share_link(
        self, clean_env: None, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert _exit_code(["card", str(_write_property(tmp_path))]) == 0

        out = capsys.readouterr().out.splitlines()
        assert out[0] == "[Disponível] Apartamento 3 quartos Vila Mariana"
        assert out[1] == "R$ 850.000,00"
        assert out[-1].startswith("Compartilhar no WhatsApp: https://wa.me/?text=")

    def test_share_with_phone(
        self, clean_env: None, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        argv = ["card", str(_write_property(tmp_path)), "--phone", "11987654321"]

        assert _exit_code(argv) == 0
        assert "https://wa.me/5511987654321?text=" in capsys.readouterr().out

    def test_validate_prints_card_first(
        self, clean_env: None, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        _exit_code(["validate", str(_write_property(tmp_path))])

        out = capsys.readouterr().out.splitlines()
        assert out[0].startswith("[Disponível] ")
        assert out[-1] == "Imóvel pronto para publicação."

    def test_lead_card(
        self, clean_env: None, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = tmp_path / "lead.json"
        path.write_text(
            '{"id": "l-1", "name": "Maria Silva", "email": "maria@example.com",'
            ' "phone": "11987654321", "source": "referral", "status": "warm",'
            ' "agent_id": "agent-1", "created_at": "2026-10-17T09:30:00Z"}',
            encoding="utf-8",
        )

        assert _exit_code(["lead", str(path)]) == 0

        out = capsys.readouterr().out.splitlines()
        assert out[0] == "Maria Silva [Morno]"
        assert "Origem: Indicação" in out
        assert out[-1] == "WhatsApp: https://wa.me/5511987654321"

    def test_unreadable_lead(
        self, clean_env: None, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert _exit_code(["lead", str(tmp_path / "nope.json")]) == 1
        assert "cannot read" in capsys.readouterr().err


@pytest.fixture()
def root_logger_state() -> Iterator[logging.Logger]:
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    yield root
    root.setLevel(level)
    root.handlers[:] = handlers


class TestLoggingSettings:
    def test_dotenv_log_level_applies(
        self,
        clean_env: None,
        root_logger_state: logging.Logger,
        monkeypatch: pytest.MonkeyPatch,
        tmp_path: Path,
    ) -> None:
        (tmp_path / ".env").write_text("LOG_LEVEL=debug\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(
            Settings,
            "model_config",
            SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore"),
        )

        assert _exit_code(["validate", str(_write_property(tmp_path))]) == 0
        assert root_logger_state.level == logging.DEBUG

    def test_flag_beats_settings(
        self,
        clean_env: None,
        root_logger_state: logging.Logger,
        monkeypatch: pytest.MonkeyPatch,
        tmp_path: Path,
    ) -> None:
        monkeypatch.setenv("LOG_LEVEL", "ERROR")

        argv = ["--log-level", "warning", "validate", str(_write_property(tmp_path))]

        assert _exit_code(argv) == 0
        assert root_logger_state.level == logging.WARNING

    def test_bad_settings_log_format(
        self,
        clean_env: None,
        root_logger_state: logging.Logger,
        monkeypatch: pytest.MonkeyPatch,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.setenv("LOG_FORMAT", "xml")

        assert _exit_code(["validate", str(_write_property(tmp_path))]) == 1
        assert "configuration error" in capsys.readouterr().err
