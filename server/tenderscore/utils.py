# server/tenderscore/utils.py

import csv
import logging
import uuid
from datetime import datetime
from io import BytesIO, StringIO

from django.conf import settings
from django.core.mail import send_mail
from django.template import TemplateDoesNotExist
from django.template.loader import render_to_string
from django.utils import timezone

logger = logging.getLogger(__name__)


def generate_tender_number(prefix=None, length=None):
    """Generate a unique tender number"""
    prefix = prefix or settings.PROCUREMENT_SETTINGS.get('TENDER_REFERENCE_PREFIX', 'TND')
    length = length or settings.PROCUREMENT_SETTINGS.get('TENDER_REFERENCE_LENGTH', 8)

    timestamp = datetime.now().strftime('%Y%m%d')
    unique_id = uuid.uuid4().hex[:length].upper()

    return f"{prefix}-{timestamp}-{unique_id}"


def get_client_ip(request):
    ip_address = request.META.get('HTTP_X_FORWARDED_FOR', request.META.get('REMOTE_ADDR', ''))
    if ip_address:
        ip_address = ip_address.split(',')[0].strip()
    return ip_address or None


def log_action(user, action, entity, details=None, request=None):
    """Write an audit log entry for an action on a model instance"""
    from .models import AuditLog

    return AuditLog.objects.create(
        user=user if user is not None and user.is_authenticated else None,
        action=action,
        entity_type=entity.__class__.__name__.lower(),
        entity_id=entity.id,
        details=details or {},
        ip_address=get_client_ip(request) if request is not None else None,
    )


def create_notification(user, title, message, notification_type='info', related_entity=None):
    """Create a notification for a user"""
    from .models import Notification

    notification_data = {
        'user': user,
        'title': title,
        'message': message,
        'type': notification_type,
    }

    if related_entity:
        notification_data['related_entity_type'] = related_entity.__class__.__name__.lower()
        notification_data['related_entity_id'] = related_entity.id

    notification = Notification.objects.create(**notification_data)

    if settings.PROCUREMENT_SETTINGS.get('NOTIFICATION_EMAIL_ENABLED', False) and user.email:
        send_notification_email(user, title, message)

    return notification


def send_notification_email(user, title, message):
    """Send email notification to user"""
    context = {
        'user': user,
        'title': title,
        'message': message,
    }

    try:
        email_content = render_to_string('notifications/email.html', context)
    except TemplateDoesNotExist:
        email_content = None

    try:
        send_mail(
            subject=title,
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[user.email],
            html_message=email_content,
            fail_silently=False,
        )
    except Exception as e:
        logger.error(f"Failed to send email notification to {user.email}: {e}")


def notify_users(users, title, message, related_entity=None):
    return [
        create_notification(user=user, title=title, message=message, related_entity=related_entity)
        for user in users
    ]


def notify_tender_closed(tender):
    """Notify staff and evaluators when a tender is closed"""
    from .models import User

    staff_users = User.objects.filter(role__in=['staff', 'admin'], is_active=True)
    notify_users(
        staff_users,
        'Tender Closed',
        f'Tender {tender.tender_number} has been closed.',
        related_entity=tender,
    )

    evaluators = User.objects.filter(role='evaluator', is_active=True)
    notify_users(
        evaluators,
        'Tender Ready for Evaluation',
        f'Tender {tender.tender_number} has been closed and is ready for evaluation.',
        related_entity=tender,
    )


def close_expired_tenders():
    """Close open tenders whose closing date has passed"""
    from .models import Tender
    from .workflow import transition_tender

    if not settings.PROCUREMENT_SETTINGS.get('AUTO_CLOSE_TENDERS', True):
        return []

    closed = []
    for tender in Tender.objects.filter(status='open', closing_date__lt=timezone.now()):
        transition_tender(tender, 'closed')
        notify_tender_closed(tender)
        closed.append(tender)
        logger.info(f"Tender {tender.tender_number} automatically closed")

    return closed


RANKING_COLUMNS = [
    'Rank', 'Tender Number', 'Vendor', 'B-BBEE Level', 'Bid Amount', 'Scoring System',
    'Price Score', 'B-BBEE Points', 'Technical Score', 'Total Score', 'Status',
]


def ranking_rows(tender):
    """Scored submissions of a tender in ranking order, unranked ones last"""
    submissions = list(tender.submissions.select_related('vendor'))
    submissions.sort(key=lambda s: (s.rank is None, s.rank or 0, s.vendor.company_name))

    return [
        [
            s.rank if s.rank is not None else '',
            tender.tender_number,
            s.vendor.company_name,
            s.vendor.bbbee_level,
            s.bid_amount if s.bid_amount is not None else '',
            s.scoring_system or '',
            s.price_score if s.price_score is not None else '',
            s.bbbee_points if s.bbbee_points is not None else '',
            s.technical_score if s.technical_score is not None else '',
            s.total_score if s.total_score is not None else '',
            s.status,
        ]
        for s in submissions
    ]


def export_ranking_csv(tender):
    """Export the tender ranking to CSV format"""
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(RANKING_COLUMNS)
    writer.writerows(ranking_rows(tender))
    output.seek(0)
    return output


def report_cell(value, blank='N/A'):
    """Placeholder for empty ranking cells; zero scores are printed as is"""
    return blank if value == '' or value is None else value


def generate_evaluation_report(tender):
    """Render the evaluation outcome of a tender as a PDF"""
    from reportlab.lib.pagesizes import A4
    from reportlab.pdfgen import canvas

    buffer = BytesIO()
    p = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4

    p.setFont("Helvetica-Bold", 16)
    p.drawString(50, height - 50, f"Evaluation Report: {tender.tender_number}")

    p.setFont("Helvetica", 11)
    p.drawString(50, height - 75, f"Title: {tender.title}")
    p.drawString(50, height - 92, f"Status: {tender.status}")
    p.drawString(50, height - 109, f"Scoring system: {tender.active_scoring_system.value}")
    p.drawString(50, height - 126, f"Closing date: {tender.closing_date:%Y-%m-%d}")

    y_position = height - 160
    p.setFont("Helvetica-Bold", 13)
    p.drawString(50, y_position, "Scoring Criteria")
    y_position -= 20

    p.setFont("Helvetica", 11)
    for criteria in tender.scoring_criteria.all():
        p.drawString(
            60, y_position,
            f"{criteria.criteria_name} ({criteria.criteria_category}) - "
            f"max {criteria.max_score}, weight {criteria.weight}"
        )
        y_position -= 16
        if y_position < 80:
            p.showPage()
            p.setFont("Helvetica", 11)
            y_position = height - 50

    y_position -= 14
    p.setFont("Helvetica-Bold", 13)
    p.drawString(50, y_position, "Ranking")
    y_position -= 20

    for row in ranking_rows(tender):
        rank, _, vendor, level, amount, _, price, points, _, total, status = row
        p.setFont("Helvetica-Bold", 11)
        p.drawString(60, y_position, f"{report_cell(rank, '-')}. {vendor} ({level})")
        p.setFont("Helvetica", 11)
        p.drawString(
            80, y_position - 16,
            f"Bid: {report_cell(amount)}  Price: {report_cell(price)}  "
            f"B-BBEE: {report_cell(points)}  Total: {report_cell(total)}  Status: {status}"
        )
        y_position -= 40

        if y_position < 80:
            p.showPage()
            y_position = height - 50

    p.showPage()
    p.save()

    buffer.seek(0)
    return buffer
