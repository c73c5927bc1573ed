"""Unit tests for error classification utilities."""

import pytest

from tasklist.core.errors import (
    ConflictError,
    DatabaseError,
    DuplicateTaskError,
    ErrorCode,
    ErrorSeverity,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    RecordNotFoundError,
    TaskError,
    ValidationError,
    classify_error_with_response,
)
from tests.unit.mocks import make_task


@pytest.mark.unit
class TestErrorHierarchy:
    """Tests for the error classes themselves."""

    def test_engine_errors_share_base(self):
        """Every engine error is a TaskError with a code."""
        for exc in (
            ValidationError("bad"),
            ConflictError("clash"),
            DuplicateTaskError("dup", similar_tasks=[]),
            InvalidTransitionError("stuck"),
            NotFoundError("gone"),
            ForbiddenError("no"),
        ):
            assert isinstance(exc, TaskError)
            assert exc.code.startswith("ERR_")

    def test_invalid_transition_is_conflict(self):
        """Transition errors are conflicts with their own code."""
        exc = InvalidTransitionError("Invalid status transition: DONE -> DONE")

        assert isinstance(exc, ConflictError)
        assert exc.code == ErrorCode.ERR_INVALID_STATE_TRANSITION

    def test_duplicate_is_conflict(self):
        """Duplicate collisions are conflicts carrying matches."""
        task = make_task(title="Milk")
        exc = DuplicateTaskError("Similar task already exists", similar_tasks=[task])

        assert isinstance(exc, ConflictError)
        assert exc.similar_tasks == [task]
        assert exc.code == ErrorCode.ERR_DUPLICATE_TASK
        assert str(exc) == "Similar task already exists"

    def test_validation_error_details(self):
        """Field errors are kept for the caller."""
        exc = ValidationError("Invalid TaskCreate", errors=[{"loc": ("title",), "msg": "too short"}])

        assert exc.errors[0]["loc"] == ("title",)
        assert ValidationError("bare").errors == []

    def test_code_override(self):
        """A specific code can be supplied per instance."""
        assert TaskError("x", code=ErrorCode.ERR_CONFLICT).code == ErrorCode.ERR_CONFLICT

    def test_record_not_found_is_database_error(self):
        """Storage errors stay outside the engine hierarchy."""
        assert issubclass(RecordNotFoundError, DatabaseError)
        assert not issubclass(DatabaseError, TaskError)


@pytest.mark.unit
class TestClassifyErrorWithResponse:
    """Tests for classify_error_with_response function."""

    def test_validation(self):
        """Validation errors map to 400."""
        response = classify_error_with_response(ValidationError("Invalid TaskCreate"))

        assert response.code == ErrorCode.ERR_VALIDATION
        assert response.status_code == 400
        assert response.severity == ErrorSeverity.LOW

    def test_duplicate(self):
        """Duplicates map to 409 with their own code."""
        response = classify_error_with_response(DuplicateTaskError("Similar task already exists", similar_tasks=[]))

        assert response.code == ErrorCode.ERR_DUPLICATE_TASK
        assert response.status_code == 409
        assert "existing task" in response.suggestion

    def test_invalid_transition(self):
        """Transition conflicts get the state-transition code."""
        response = classify_error_with_response(InvalidTransitionError("Invalid status transition: ARCHIVED -> OPEN"))

        assert response.code == ErrorCode.ERR_INVALID_STATE_TRANSITION
        assert response.status_code == 409
        assert response.message == "Invalid status transition: ARCHIVED -> OPEN"

    def test_other_conflict(self):
        """Other conflicts keep the generic conflict code."""
        response = classify_error_with_response(ConflictError("Cannot assign personal tasks"))

        assert response.code == ErrorCode.ERR_CONFLICT
        assert response.status_code == 409

    def test_conflict_code_not_guessed_from_message(self):
        """Only the error class decides the transition code."""
        response = classify_error_with_response(ConflictError("Invalid status transition wording elsewhere"))

        assert response.code == ErrorCode.ERR_CONFLICT

    def test_not_found_hides_details(self):
        """Not-found messages never echo the id."""
        response = classify_error_with_response(NotFoundError("Task abc123 not found"))

        assert response.code == ErrorCode.ERR_TASK_NOT_FOUND
        assert response.status_code == 404
        assert "abc123" not in response.message

    def test_forbidden(self):
        """Permission denials map to 403."""
        response = classify_error_with_response(ForbiddenError("No permission to update this task"))

        assert response.code == ErrorCode.ERR_PERMISSION_DENIED
        assert response.status_code == 403
        assert response.severity == ErrorSeverity.MEDIUM

    def test_database(self):
        """Storage failures map to 500 with high severity."""
        response = classify_error_with_response(RecordNotFoundError("Record not found in tasks: x"))

        assert response.code == ErrorCode.ERR_DATABASE
        assert response.status_code == 500
        assert response.severity == ErrorSeverity.HIGH

    def test_unknown(self):
        """Anything else is an unknown error."""
        response = classify_error_with_response(RuntimeError("boom"))

        assert response.code == ErrorCode.ERR_UNKNOWN
        assert response.status_code == 500
        assert "boom" not in response.message
