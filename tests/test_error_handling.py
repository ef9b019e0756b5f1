"""
Tests for error types and error tracking.
"""

from ozb_deal_notifier.utils.error_handling import (
    ConfigurationError,
    DeliveryError,
    ErrorCategory,
    ErrorTracker,
    FetchError,
    NotifierError,
    StateError,
)


class TestErrorTypes:
    """Test cases for the exception hierarchy."""

    def test_hierarchy(self):
        for error_type in (ConfigurationError, FetchError, DeliveryError, StateError):
            assert issubclass(error_type, NotifierError)

    def test_status_carried(self):
        assert FetchError("RSS fetch failed: 503", status=503).status == 503
        assert DeliveryError("Discord webhook failed").status is None
        assert str(FetchError("RSS fetch failed: 503")) == "RSS fetch failed: 503"


class TestErrorTracker:
    """Test cases for ErrorTracker."""

    def test_record_error(self):
        tracker = ErrorTracker()

        info = tracker.record_error(
            "orchestrator",
            ErrorCategory.NETWORK,
            "RSS fetch failed: 503",
            context={"status": 503},
        )

        assert info.component == "orchestrator"
        assert info.category == ErrorCategory.NETWORK
        assert info.exception_type == "Unknown"
        assert info.traceback == ""
        assert info.context == {"status": 503}
        assert tracker.errors == [info]

    def test_record_error_with_exception(self):
        tracker = ErrorTracker()
        try:
            raise DeliveryError("Discord webhook failed: 500", status=500)
        except DeliveryError as e:
            info = tracker.record_error(
                "orchestrator", ErrorCategory.MESSAGE_DELIVERY, str(e), e
            )

        assert info.exception_type == "DeliveryError"
        assert "Discord webhook failed: 500" in info.traceback

    def test_error_counts(self):
        tracker = ErrorTracker()
        tracker.record_error("orchestrator", ErrorCategory.NETWORK, "a")
        tracker.record_error("orchestrator", ErrorCategory.NETWORK, "b")
        tracker.record_error("server", ErrorCategory.SYSTEM, "c")

        assert tracker.error_counts == {"orchestrator.network": 2, "server.system": 1}

    def test_bounded_history(self):
        tracker = ErrorTracker(max_errors=3)
        for i in range(5):
            tracker.record_error("orchestrator", ErrorCategory.STATE, f"error {i}")

        assert [e.message for e in tracker.errors] == ["error 2", "error 3", "error 4"]
        assert tracker.error_counts["orchestrator.state"] == 5

    def test_get_error_stats(self):
        tracker = ErrorTracker()
        assert tracker.get_error_stats()["last_error"] is None

        tracker.record_error("orchestrator", ErrorCategory.CONFIGURATION, "Missing webhook")
        stats = tracker.get_error_stats()

        assert stats["total_errors"] == 1
        assert stats["category_breakdown"]["configuration"] == 1
        assert stats["category_breakdown"]["network"] == 0
        assert stats["last_error"] == "Missing webhook"

    def test_component_errors(self):
        tracker = ErrorTracker()
        for i in range(4):
            tracker.record_error("orchestrator", ErrorCategory.NETWORK, f"o{i}")
        tracker.record_error("server", ErrorCategory.SYSTEM, "s0")

        recent = tracker.get_component_errors("orchestrator", limit=2)
        assert [e.message for e in recent] == ["o2", "o3"]
