"""
Celery Tasks for the ATS app

- Interview invitation e-mail sent after an interview is scheduled
"""

import logging
from smtplib import SMTPException

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)


# ==================== INTERVIEW INVITATIONS ====================

@shared_task(
    bind=True,
    name='ats.tasks.send_interview_invitation_email',
    max_retries=3,
    default_retry_delay=120,
    autoretry_for=(SMTPException,),
    retry_backoff=True,
    queue='emails',
)
def send_interview_invitation_email(self, interview_id: int) -> dict:
    """
    E-mail the candidate an invitation for a scheduled interview.

    Args:
        interview_id: Interview to announce

    Returns:
        Dict with status and recipient
    """
    from .models import Interview

    interview = (
        Interview.objects
        .select_related('application__position__agency', 'application__candidate__user')
        .filter(pk=interview_id)
        .first()
    )
    if interview is None:
        logger.warning(f"Interview {interview_id} not found; invitation not sent")
        return {'status': 'skipped', 'reason': 'interview_not_found'}

    application = interview.application
    candidate = application.candidate
    recipient = candidate.user.email
    if not recipient:
        return {'status': 'skipped', 'reason': 'no_email'}

    position_title = application.position.title
    agency_name = application.position.agency.name

    context = {
        'first_name': candidate.first_name,
        'position_title': position_title,
        'agency_name': agency_name,
        'interview': interview,
        'scheduled_date': interview.scheduled_at.strftime('%A, %B %d, %Y'),
        'scheduled_time': interview.scheduled_at.strftime('%H:%M %Z'),
        'is_remote': interview.mode == Interview.InterviewMode.REMOTE,
        'is_in_person': interview.mode == Interview.InterviewMode.IN_PERSON,
        'is_phone': interview.mode == Interview.InterviewMode.PHONE,
        'application_link': (
            f"{settings.FRONTEND_URL.rstrip('/')}"
            f"/dashboard/candidate/applications/{application.id}/status"
        ),
    }

    subject = f"Interview Invitation: {position_title} at {agency_name}"
    text_content = render_to_string('emails/interview_invitation.txt', context)
    html_content = render_to_string('emails/interview_invitation.html', context)

    send_mail(
        subject=subject,
        message=text_content,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[recipient],
        html_message=html_content,
    )

    logger.info(f"Interview invitation for interview {interview.id} sent to {recipient}")
    return {'status': 'sent', 'recipient': recipient}
