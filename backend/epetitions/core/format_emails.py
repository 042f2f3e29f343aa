"""Email Formatting — subjects and plain-text bodies for outgoing mail. Pure, no IO.

Invariants:
    - Threshold subject: "The petition '{action}' has reached {count} signatures"
    - Every body ends with the feedback address so recipients can reply somewhere
    - Formatters return EmailContent; the mailer turns it into a MIME message
"""

from dataclasses import dataclass

from epetitions.core.domain_types import EmailReceiptName
from epetitions.core.site_config import SiteConfig, format_delimited


@dataclass(frozen=True)
class EmailContent:
    sender: str
    recipient: str
    subject: str
    body: str


def _footer(site: SiteConfig) -> str:
    return (
        "\n\nThanks,\n"
        f"{site.title}\n\n"
        f"Questions or feedback? Contact {site.feedback_email}\n"
    )


def threshold_subject(action: str, signature_count: int) -> str:
    return (
        f"The petition '{action}' has reached "
        f"{format_delimited(signature_count)} signatures"
    )


_THRESHOLD_LEADS = {
    EmailReceiptName.GOVERNMENT_RESPONSE: "The Government has responded to the petition you signed.",
    EmailReceiptName.DEBATE_SCHEDULED: "Parliament is going to debate the petition you signed.",
    EmailReceiptName.DEBATE_OUTCOME: "Parliament has debated the petition you signed.",
    EmailReceiptName.PETITION_EMAIL: "There is an update on the petition you signed.",
}


def format_threshold_email(
    site: SiteConfig,
    petition,
    signature,
    name: EmailReceiptName | str,
) -> EmailContent:
    """Notification sent to one opted-in signer when a petition crosses a threshold."""
    name = EmailReceiptName(name)
    lines = [f"Dear {signature.name},", "", _THRESHOLD_LEADS[name]]
    if name == EmailReceiptName.GOVERNMENT_RESPONSE and petition.response_summary:
        lines += ["", petition.response_summary]
    if name == EmailReceiptName.DEBATE_SCHEDULED and petition.scheduled_debate_date:
        lines += ["", f"The debate is scheduled for {petition.scheduled_debate_date:%d %B %Y}."]
    lines += ["", f"Read more: {site.petition_url(petition.id)}"]
    return EmailContent(
        sender=site.email_from,
        recipient=signature.email,
        subject=threshold_subject(petition.action, petition.signature_count),
        body="\n".join(lines) + _footer(site),
    )


def format_validation_email(site: SiteConfig, petition, signature) -> EmailContent:
    """Ask a signer to confirm their email address."""
    link = f"{site.url}/signatures/{signature.perishable_token}/validate"
    if signature.creator:
        subject = f"Please confirm your email address for your petition '{petition.action}'"
    else:
        subject = f"Please confirm your signature on '{petition.action}'"
    body = (
        f"Dear {signature.name},\n\n"
        f"Click the link below to confirm your email address:\n{link}\n"
    )
    return EmailContent(
        sender=site.email_from,
        recipient=signature.email,
        subject=subject,
        body=body + _footer(site),
    )


def format_creator_confirmation_email(site: SiteConfig, petition, signature) -> EmailContent:
    """Sent to the creator once their petition has been published."""
    body = (
        f"Dear {signature.name},\n\n"
        f"Your petition '{petition.action}' is now open for signatures.\n"
        f"Share it: {site.petition_url(petition.id)}\n\n"
        f"It needs {site.formatted_threshold_for_response} signatures for a "
        f"Government response and {site.formatted_threshold_for_debate} to be "
        "considered for debate in Parliament."
    )
    return EmailContent(
        sender=site.email_from,
        recipient=signature.email,
        subject=f"Your petition '{petition.action}' has been published",
        body=body + _footer(site),
    )
