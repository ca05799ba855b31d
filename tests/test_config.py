"""Tests for bazapta.core.config."""

from __future__ import annotations

from pathlib import Path

from bazapta.core.config import Settings


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings.from_env({})
        assert settings.listen == "0.0.0.0:8080"
        assert settings.reprepro_path == Path("/srv/reprepro/internal/")
        assert settings.sudo is True
        assert settings.verbose is False
        assert (settings.terms_dir / "DebianPackage.json").is_file()

    def test_from_environment(self) -> None:
        settings = Settings.from_env({
            "BAZAPTA_LISTEN": "127.0.0.1:9000",
            "BAZAPTA_REPREPRO_PATH": "/srv/reprepro/external",
            "BAZAPTA_VERBOSE": "yes",
            "BAZAPTA_SUDO": "0",
            "UNRELATED": "x",
        })
        assert settings.host_port == ("127.0.0.1", 9000)
        assert settings.reprepro_path == Path("/srv/reprepro/external")
        assert settings.verbose is True
        assert settings.sudo is False

    def test_port_only(self) -> None:
        assert Settings(listen=":8081").host_port == ("0.0.0.0", 8081)

    def test_ipv6_brackets_are_stripped(self) -> None:
        assert Settings(listen="[::]:8080").host_port == ("::", 8080)
        assert Settings(listen="[::1]:9000").host_port == ("::1", 9000)
