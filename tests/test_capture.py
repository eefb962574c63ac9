"""Tests für services/capture.py – Capture-Command."""

import pytest

from cli.types import Capability, PermissionState
from errors import CAPTURE_FAILED, PERMISSION_DENIED, PermissionDenied, ProviderFailure, TargetNotFound
from services import CaptureService

from conftest import FAKE_PNG, FakeCaptureProvider


class TestCaptureViewport:
    """Tests für capture_viewport()."""

    def test_returns_png(self, make_gate, capture_provider):
        gate, _ = make_gate()
        service = CaptureService(gate, capture_provider)

        assert service.capture_viewport() == FAKE_PNG
        assert capture_provider.capture_calls == 1

    def test_without_permission_provider_not_called(self, make_gate, capture_provider):
        """Fehlende Berechtigung → Provider wird gar nicht angefasst."""
        gate, backends = make_gate(screen=PermissionState.unknown)
        service = CaptureService(gate, capture_provider)

        with pytest.raises(PermissionDenied) as exc_info:
            service.capture_viewport()

        assert exc_info.value.code == PERMISSION_DENIED
        assert "Visit /permission" in exc_info.value.message
        assert capture_provider.find_calls == 0
        assert capture_provider.capture_calls == 0
        # Anfrage wurde nebenbei angestoßen
        assert backends[Capability.screen_capture].request_count == 1

    def test_denied_does_not_reprompt_while_pending(self, make_gate, capture_provider):
        gate, backends = make_gate(screen=PermissionState.unknown)
        service = CaptureService(gate, capture_provider)

        for _ in range(3):
            with pytest.raises(PermissionDenied):
                service.capture_viewport()

        assert backends[Capability.screen_capture].request_count == 1

    def test_no_studio_window(self, make_gate):
        gate, _ = make_gate()
        provider = FakeCaptureProvider(window=None)
        service = CaptureService(gate, provider)

        with pytest.raises(TargetNotFound):
            service.capture_viewport()
        assert provider.capture_calls == 0

    @pytest.mark.parametrize("png", [None, b""], ids=["none", "empty"])
    def test_empty_capture_is_failure(self, make_gate, studio_window, png):
        gate, _ = make_gate()
        service = CaptureService(gate, FakeCaptureProvider(window=studio_window, png=png))

        with pytest.raises(ProviderFailure) as exc_info:
            service.capture_viewport()
        assert exc_info.value.code == CAPTURE_FAILED

    def test_width_and_format_are_ignored(self, make_gate, capture_provider):
        gate, _ = make_gate()
        service = CaptureService(gate, capture_provider)

        assert service.capture_viewport(width=640, format="jpeg") == FAKE_PNG


class TestStubCaptureProvider:
    def test_finds_nothing(self):
        from providers.capture import StubCaptureProvider

        assert StubCaptureProvider().find_target_window() is None
