"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""

from datetime import date


class TestSchemaImports:
    def test_import_booking_schema(self):
        from clinic_scheduler.schemas.booking_schema import Booking, BookingStatus, Role

        booking = Booking(
            booking_id=1, service_id=1, date=date(2026, 10, 19), start_slot_id=1, status="Urgent"
        )
        assert booking.status == BookingStatus.URGENT
        assert Role.CLIENT == "client"

    def test_missing_status_defaults_to_pending(self):
        from clinic_scheduler.schemas.booking_schema import Booking, BookingStatus

        booking = Booking(
            booking_id=1, service_id=1, date=date(2026, 10, 19), start_slot_id=1, status=None
        )
        assert booking.status == BookingStatus.PENDING

    def test_blank_request_status_means_unset(self):
        from clinic_scheduler.schemas.booking_schema import BookingEditRequest

        assert BookingEditRequest(booking_id=1, status="  ").status is None

    def test_unknown_create_status_is_dropped(self):
        from clinic_scheduler.schemas.booking_schema import BookingRequest

        assert BookingRequest(service_id=1, status="Scheduled").status is None

    def test_edit_status_kept_as_lower_case_text(self):
        from clinic_scheduler.schemas.booking_schema import BookingEditRequest, BookingStatus

        assert BookingEditRequest(booking_id=1, status=" Scheduled ").status == "scheduled"
        assert BookingEditRequest(booking_id=1, status=BookingStatus.URGENT).status == "urgent"


class TestEngineImports:
    def test_engine_reexports(self):
        from clinic_scheduler.engine import (
            AvailabilityCalculator,
            BookingValidator,
            ConflictDetector,
            ServiceDurationResolver,
            StatusTransitionGuard,
            TimeSlotCatalog,
            can_transition,
        )

        assert callable(can_transition)
        assert TimeSlotCatalog is not None
        assert all(
            cls is not None
            for cls in (AvailabilityCalculator, BookingValidator, ConflictDetector,
                        ServiceDurationResolver, StatusTransitionGuard)
        )

    def test_import_errors(self):
        from clinic_scheduler.errors import Rejection, RejectionReason

        rejection = Rejection(RejectionReason.SLOT_CONFLICT, "taken")
        assert str(rejection) == "taken"
        assert RejectionReason.SLOT_CONFLICT == "slot_conflict"


class TestToolImports:
    def test_reference_data(self):
        from clinic_scheduler.tools.reference_data import (
            SERVICE_CATALOG,
            build_slot_catalog,
            get_all_services,
            get_service,
        )

        assert len(get_all_services()) == len(SERVICE_CATALOG)
        assert get_service(3).duration_minutes == 60
        assert get_service(999) is None
        assert len(build_slot_catalog()) == 16

    def test_services_listed_by_name(self):
        from clinic_scheduler.tools.reference_data import get_all_services

        names = [s.name for s in get_all_services()]
        assert names == sorted(names)


class TestLoggingContext:
    def test_request_id_attached_to_records(self):
        import logging

        from clinic_scheduler.logging_context import RequestIdFilter, get_request_logger, request_scope

        logger = get_request_logger("clinic_scheduler.test")
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        assert any(isinstance(f, RequestIdFilter) for f in logger.filters)
        with request_scope() as request_id:
            assert logger.filters[0].filter(record)
        assert record.request_id == request_id

    def test_scope_restores_outer_id(self):
        from clinic_scheduler.logging_context import NO_REQUEST_ID, get_request_id, request_scope

        with request_scope() as outer:
            assert outer.startswith("REQ-")
            with request_scope() as inner:
                assert get_request_id() == inner != outer
            assert get_request_id() == outer
        assert get_request_id() == NO_REQUEST_ID

    def test_handler_formats_records_from_any_logger(self):
        import io
        import logging

        from clinic_scheduler.logging_context import (
            REQUEST_LOG_FORMAT,
            install_request_id_filter,
            request_scope,
        )

        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(REQUEST_LOG_FORMAT))
        install_request_id_filter(handler)
        install_request_id_filter(handler)
        assert len(handler.filters) == 1

        record = logging.makeLogRecord({"name": "thirdparty", "msg": "hello", "levelname": "INFO"})
        with request_scope() as request_id:
            handler.handle(record)
        assert f"[{request_id}] INFO: hello" in stream.getvalue()
