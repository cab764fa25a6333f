"""Outbound email and SMS notifications.

Messages are delivered on a background task; a failed delivery is logged
and never reported back to the request that triggered it.
"""
import logging

import requests
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Content, Email, Mail, To

logger = logging.getLogger(__name__)


class EmailSender:
    """SendGrid sender; logs the message instead when no API key is set."""

    def __init__(self, api_key='', from_email='noreply@chatpadel.com'):
        self.api_key = api_key
        self.from_email = from_email

    def send(self, to, subject, content):
        if not self.api_key:
            logger.info('SENDGRID_API_KEY not configured, email to %s not sent. '
                        'Subject: %s\n%s', to, subject, content)
            return False

        message = Mail(
            from_email=Email(self.from_email, 'ChatPadel'),
            to_emails=To(to),
            subject=subject,
            plain_text_content=Content('text/plain', content),
            html_content=Content('text/html', content.replace('\n', '<br>')),
        )
        response = SendGridAPIClient(self.api_key).send(message)
        if 200 <= response.status_code < 300:
            logger.info('Email sent to %s', to)
            return True
        logger.error('SendGrid returned status %s: %s', response.status_code, response.body)
        return False


class SmsSender:
    """Posts messages to an HTTP SMS gateway; logs them when unconfigured."""

    def __init__(self, gateway_url='', token='', from_number='', timeout=10):
        self.gateway_url = gateway_url
        self.token = token
        self.from_number = from_number
        self.timeout = timeout

    def send(self, phone_number, content):
        if not self.gateway_url:
            logger.info('SMS_GATEWAY_URL not configured, SMS to %s not sent: %s',
                        phone_number, content)
            return False

        headers = {}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        response = requests.post(
            self.gateway_url,
            json={'to': phone_number, 'from': self.from_number, 'body': content},
            headers=headers,
            timeout=self.timeout,
        )
        response.raise_for_status()
        logger.info('SMS sent to %s', phone_number)
        return True


def _run_inline(func, *args, **kwargs):
    func(*args, **kwargs)


class NotificationDispatcher:
    def __init__(self, email_sender, sms_sender, spawn=None):
        self.email_sender = email_sender
        self.sms_sender = sms_sender
        self._spawn = spawn or _run_inline

    @classmethod
    def from_config(cls, config, spawn=None):
        timeout = config.get('NOTIFICATION_TIMEOUT_SECONDS', 10)
        return cls(
            EmailSender(
                api_key=config.get('SENDGRID_API_KEY', ''),
                from_email=config.get('FROM_EMAIL', 'noreply@chatpadel.com'),
            ),
            SmsSender(
                gateway_url=config.get('SMS_GATEWAY_URL', ''),
                token=config.get('SMS_GATEWAY_TOKEN', ''),
                from_number=config.get('SMS_FROM_NUMBER', ''),
                timeout=timeout,
            ),
            spawn=spawn,
        )

    def _deliver(self, label, send, *args):
        try:
            send(*args)
        except Exception:
            logger.exception('%s notification failed', label)

    def _enqueue(self, label, send, *args):
        try:
            self._spawn(self._deliver, label, send, *args)
        except Exception:
            logger.exception('Could not schedule %s notification', label)

    def match_joined(self, user, match):
        """Confirm a newly taken seat by email and SMS."""
        # Copy plain values: the background task runs outside the request.
        email = user.email
        full_name = user.full_name
        phone_number = user.phone_number
        location, date, time = match.location, match.date, match.time

        subject = f'Match Confirmation - {location}'
        body = (
            f'Hello {full_name}, you have successfully joined the match at '
            f'{location} on {date} at {time}. See you there!'
        )
        sms = f"ChatPadel: You're in! Match confirmed @ {location}, {date} {time}."
        self._enqueue('match_joined_email', self.email_sender.send, email, subject, body)
        self._enqueue('match_joined_sms', self.sms_sender.send, phone_number, sms)

    def welcome(self, user):
        body = (
            f'Hello {user.full_name},\n\n'
            'Welcome to ChatPadel! Your account has been successfully created.\n\n'
            'You can now:\n'
            '- Join matches with other padel players\n'
            '- Get coaching tips from the ChatPadel coach\n'
            '- Connect with the padel community\n\n'
            'Best regards,\nThe ChatPadel Team'
        )
        self._enqueue('welcome_email', self.email_sender.send,
                      user.email, 'Welcome to ChatPadel!', body)

    def password_reset(self, email, reset_link):
        body = (
            'You requested a password reset. Please use the following link to '
            f'reset your password:\n\n{reset_link}\n\n'
            'If you did not request this, please ignore this email.'
        )
        self._enqueue('password_reset_email', self.email_sender.send,
                      email, 'ChatPadel - Reset Your Password', body)
