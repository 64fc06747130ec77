"""Unit tests for the verification review state machine."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.exc import OperationalError

from src.models.results import ErrorKind
from src.models.user import ServiceType, User
from src.models.verification import (
    DocumentSubmission,
    ReviewAction,
    ReviewDecision,
    VerificationRequest,
    VerificationStatus,
)
from src.services.verification_review import (
    ALL_CAUGHT_UP_MESSAGE,
    VerificationReviewService,
)


@pytest.fixture
def member_id():
    return uuid4()


@pytest.fixture
def pending_request(member_id):
    return VerificationRequest(user_id=member_id, service_type="VT", military_branch="Army")


@pytest.fixture
def verification_repo():
    repo = Mock()
    repo.list_pending = AsyncMock(return_value=[])
    repo.get_by_user_id = AsyncMock(return_value=None)
    repo.transition_from_pending = AsyncMock(return_value=None)
    repo.create = AsyncMock(side_effect=lambda request: request)
    repo.append_document = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def user_repo():
    repo = Mock()
    repo.get_by_id = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def service(verification_repo, user_repo, permission_checker):
    return VerificationReviewService(verification_repo, user_repo, permission_checker)


def lock_helper(acquired=True, error=None):
    helper = Mock()

    @asynccontextmanager
    async def acquire_review_lock(user_id):
        if error is not None:
            raise error
        yield acquired

    helper.acquire_review_lock = acquire_review_lock
    return helper


def reviewed(request, status, notes=None):
    return request.model_copy(
        update={"status": status, "reviewer_notes": notes, "reviewed_by": "admin-1"}
    )


class TestPendingQueue:
    @pytest.mark.asyncio
    async def test_empty_queue(self, service, admin_principal):
        result = await service.list_pending(admin_principal)

        assert result.success is True
        assert result.requests == []
        assert result.message == ALL_CAUGHT_UP_MESSAGE

    @pytest.mark.asyncio
    async def test_pending_requests_listed(
        self, service, verification_repo, admin_principal, pending_request
    ):
        verification_repo.list_pending.return_value = [pending_request]

        result = await service.list_pending(admin_principal)

        assert result.success is True
        assert result.requests == [pending_request]

    @pytest.mark.asyncio
    async def test_non_admin_cannot_view_queue(self, service, verification_repo, member_principal):
        result = await service.list_pending(member_principal)

        assert result.success is False
        assert result.error is ErrorKind.AUTHORIZATION
        verification_repo.list_pending.assert_not_awaited()


class TestReview:
    @pytest.mark.asyncio
    async def test_approve_pending_request(
        self, service, verification_repo, admin_principal, pending_request, member_id
    ):
        verification_repo.transition_from_pending.return_value = reviewed(
            pending_request, VerificationStatus.VERIFIED
        )

        result = await service.review(
            admin_principal, ReviewDecision(user_id=member_id, action=ReviewAction.APPROVE)
        )

        assert result.success is True
        assert result.message == "Verification approved"
        assert result.request.status is VerificationStatus.VERIFIED
        verification_repo.transition_from_pending.assert_awaited_once_with(
            member_id, VerificationStatus.VERIFIED, None, "admin-1"
        )

    @pytest.mark.asyncio
    async def test_deny_records_trimmed_notes(
        self, service, verification_repo, admin_principal, pending_request, member_id
    ):
        verification_repo.transition_from_pending.return_value = reviewed(
            pending_request, VerificationStatus.DENIED, "Document unreadable"
        )

        result = await service.review(
            admin_principal,
            ReviewDecision(
                user_id=member_id, action=ReviewAction.DENY, notes="  Document unreadable  "
            ),
        )

        assert result.success is True
        assert result.message == "Verification denied"
        verification_repo.transition_from_pending.assert_awaited_once_with(
            member_id, VerificationStatus.DENIED, "Document unreadable", "admin-1"
        )

    @pytest.mark.asyncio
    async def test_denied_request_cannot_be_approved(
        self, service, verification_repo, admin_principal, pending_request, member_id
    ):
        verification_repo.get_by_user_id.return_value = reviewed(
            pending_request, VerificationStatus.DENIED
        )

        result = await service.review(
            admin_principal, ReviewDecision(user_id=member_id, action=ReviewAction.APPROVE)
        )

        assert result.success is False
        assert result.error is ErrorKind.CONFLICT
        assert result.message == "Verification request is already denied"
        assert result.retryable is False

    @pytest.mark.asyncio
    async def test_missing_request(self, service, admin_principal, member_id):
        result = await service.review(
            admin_principal, ReviewDecision(user_id=member_id, action=ReviewAction.DENY)
        )

        assert result.success is False
        assert result.error is ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_non_admin_rejected_before_any_read(
        self, service, verification_repo, member_principal, member_id
    ):
        result = await service.review(
            member_principal, ReviewDecision(user_id=member_id, action=ReviewAction.APPROVE)
        )

        assert result.success is False
        assert result.error is ErrorKind.AUTHORIZATION
        verification_repo.transition_from_pending.assert_not_awaited()
        verification_repo.get_by_user_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_concurrent_review_is_rejected(
        self, verification_repo, user_repo, permission_checker, admin_principal, member_id
    ):
        service = VerificationReviewService(
            verification_repo, user_repo, permission_checker, lock_helper=lock_helper(False)
        )

        result = await service.review(
            admin_principal, ReviewDecision(user_id=member_id, action=ReviewAction.APPROVE)
        )

        assert result.success is False
        assert result.error is ErrorKind.CONFLICT
        assert result.retryable is True
        verification_repo.transition_from_pending.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lock_failure_is_upstream_error(
        self, verification_repo, user_repo, permission_checker, admin_principal, member_id
    ):
        service = VerificationReviewService(
            verification_repo,
            user_repo,
            permission_checker,
            lock_helper=lock_helper(error=RedisConnectionError("redis down")),
        )

        result = await service.review(
            admin_principal, ReviewDecision(user_id=member_id, action=ReviewAction.APPROVE)
        )

        assert result.success is False
        assert result.error is ErrorKind.UPSTREAM_UNAVAILABLE
        verification_repo.transition_from_pending.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_store_failure_is_retryable(
        self, service, verification_repo, admin_principal, member_id
    ):
        verification_repo.transition_from_pending.side_effect = OperationalError(
            "UPDATE", {}, Exception("down")
        )

        result = await service.review(
            admin_principal, ReviewDecision(user_id=member_id, action=ReviewAction.APPROVE)
        )

        assert result.success is False
        assert result.error is ErrorKind.UPSTREAM_UNAVAILABLE
        assert result.retryable is True


class TestSubmitDocument:
    @pytest.fixture
    def member(self, member_id):
        return User(
            id=member_id,
            email="vet@example.com",
            service_type=ServiceType.VETERAN,
            military_branch="Navy",
        )

    @pytest.fixture
    def submission(self):
        return DocumentSubmission(
            document_type="DD214",
            document_url="https://files.example.com/dd214.pdf",
            content_type="application/pdf",
            size_bytes=120_000,
        )

    @pytest.mark.asyncio
    async def test_first_document_creates_pending_request(
        self, service, verification_repo, user_repo, member, submission, member_id
    ):
        user_repo.get_by_id.return_value = member

        result = await service.submit_document(member_id, submission)

        assert result.success is True
        created = verification_repo.create.await_args.args[0]
        assert created.status is VerificationStatus.PENDING
        assert created.service_type == "VT"
        assert created.military_branch == "Navy"
        assert [d.document_type for d in created.documents] == ["DD214"]

    @pytest.mark.asyncio
    async def test_document_added_to_pending_request(
        self, service, verification_repo, user_repo, member, submission, pending_request, member_id
    ):
        user_repo.get_by_id.return_value = member
        verification_repo.get_by_user_id.return_value = pending_request
        verification_repo.append_document.return_value = pending_request

        result = await service.submit_document(member_id, submission)

        assert result.success is True
        verification_repo.append_document.assert_awaited_once()
        verification_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_decided_request_accepts_no_documents(
        self, service, verification_repo, user_repo, member, submission, pending_request, member_id
    ):
        user_repo.get_by_id.return_value = member
        verification_repo.get_by_user_id.return_value = reviewed(
            pending_request, VerificationStatus.VERIFIED
        )

        result = await service.submit_document(member_id, submission)

        assert result.success is False
        assert result.error is ErrorKind.CONFLICT
        verification_repo.append_document.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_user(self, service, submission, member_id):
        result = await service.submit_document(member_id, submission)

        assert result.success is False
        assert result.error is ErrorKind.NOT_FOUND
