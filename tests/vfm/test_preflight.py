"""Tests for pre-flight overwrite detection."""

from __future__ import annotations

import pytest

from tests.vfm.mocks import MockBackend, MockUploadOnlyBackend
from vfm.preflight import check_existing


class TestCheckExisting:
    @pytest.mark.asyncio
    async def test_reports_existing_names(self) -> None:
        # Given: A backend where logo.png already exists
        backend = MockBackend(existing={"logo.png"})

        # When: Checking two names
        report = await check_existing(backend, ["logo.png", "banner.jpg"])

        # Then: Only the existing one is reported, nothing uploaded
        assert report.checked is True
        assert report.existing == ["logo.png"]
        assert report.has_existing is True
        assert report.warnings == []
        assert backend.events == [("exists", "logo.png"), ("exists", "banner.jpg")]

    @pytest.mark.asyncio
    async def test_backend_without_check_is_a_no_op(self) -> None:
        backend = MockUploadOnlyBackend()

        report = await check_existing(backend, ["logo.png"])

        assert report.checked is False
        assert report.existing == []
        assert report.has_existing is False
        assert backend.events == []

    @pytest.mark.asyncio
    async def test_failed_check_is_a_warning_and_treated_absent(self) -> None:
        # Given: The check for one name fails
        backend = MockBackend(existing={"a.png", "b.png"}, exists_fails={"a.png"})

        # When: Checking both
        report = await check_existing(backend, ["a.png", "b.png"])

        # Then: No exception; a.png becomes a warning, b.png still reported
        assert report.existing == ["b.png"]
        assert len(report.warnings) == 1
        assert report.warnings[0].startswith("could not check if a.png exists")

    @pytest.mark.asyncio
    async def test_no_names_checks_nothing(self) -> None:
        report = await check_existing(MockBackend(), [])

        assert report.checked is True
        assert report.existing == []
