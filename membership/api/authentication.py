import logging

from django.conf import settings
from rest_framework.authentication import SessionAuthentication

from membership.models import Member

logger = logging.getLogger(__name__)


def login_member(request, member: Member):
    """Start a session for `member` on the underlying Django request."""
    session = request.session
    session.cycle_key()
    session[settings.SESSION_MEMBER_KEY] = member.pk


def logout_member(request):
    request.session.flush()


class MemberSessionAuthentication(SessionAuthentication):
    """
    Authenticate API requests from the member id stored in the session.

    Members are not Django auth users, so the session carries the member id
    under SESSION_MEMBER_KEY instead of the usual auth keys. CSRF checks are
    enforced the same way as for DRF's session authentication.
    """

    def authenticate(self, request):
        member_id = request._request.session.get(settings.SESSION_MEMBER_KEY)
        if not member_id:
            return None

        member = Member.objects.filter(pk=member_id).first()
        if member is None:
            # Member was deleted while logged in
            logger.info(f"Dropping session of missing member {member_id}")
            request._request.session.flush()
            return None

        self.enforce_csrf(request)
        return (member, None)
