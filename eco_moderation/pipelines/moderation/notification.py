"""Admin notification stage (Stage 05).

Emails carry two signed links back to ``GET /moderation/action``: one keeps
the eco (marks it safe), the other deletes it. Delivery is best effort; a
failed send is logged and counted but never fails the pipeline.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from html import escape
from urllib.parse import urlencode

from eco_moderation.config.settings import settings
from eco_moderation.services.email import EmailServiceError, send_email
from eco_moderation.telemetry import record_notification
from eco_moderation.utils.security import sign_record_token

from .types import NotificationKind, RecordSnapshot

logger = logging.getLogger("eco_moderation.services.moderation_pipeline")

ACTION_PATH = "/moderation/action"


@dataclass(frozen=True)
class ActionLinks:
    keep: str
    delete: str


def build_action_links(record_id: str, *, issued_at: int | None = None) -> ActionLinks:
    """Signed keep/delete URLs for ``record_id``."""

    if issued_at is None and settings.moderation.link_max_age_seconds is not None:
        issued_at = int(time.time())
    token = sign_record_token(record_id, issued_at=issued_at)
    base_url = settings.moderation.public_base_url.rstrip("/") + ACTION_PATH

    def _link(action: str) -> str:
        query = urlencode({"id": record_id, "action": action, "token": token})
        return f"{base_url}?{query}"

    return ActionLinks(keep=_link("keep"), delete=_link("delete"))


def _action_buttons(links: ActionLinks) -> str:
    return (
        '<div style="display: flex; gap: 10px;">'
        f'<a href="{escape(links.delete)}" style="background: #ef4444; color: white; '
        'padding: 10px 20px; text-decoration: none; border-radius: 5px;">🗑️ Eliminar Eco</a>'
        f'<a href="{escape(links.keep)}" style="background: #22c55e; color: white; '
        'padding: 10px 20px; text-decoration: none; border-radius: 5px;">'
        "✅ Mantener (Falso Positivo)</a>"
        "</div>"
    )


def _details(record: RecordSnapshot, reason: str | None, transcript: str | None) -> str:
    title = escape(record.title or "Sin título")
    author = escape(record.author or "Anónimo")
    return (
        '<div style="background: #f4f4f5; padding: 20px; border-radius: 10px; margin: 20px 0;">'
        f"<p><strong>ID:</strong> {escape(record.id)}</p>"
        f"<p><strong>Título:</strong> {title}</p>"
        f"<p><strong>Autor:</strong> {author}</p>"
        f"<p><strong>Motivo:</strong> {escape(reason or '-')}</p>"
        f'<p><strong>Transcripción:</strong> <i>"{escape(transcript or "")}"</i></p>'
        "</div>"
    )


def _player(file_url: str) -> str:
    url = escape(file_url)
    return (
        "<h3>Escuchar Eco:</h3>"
        f'<audio controls src="{url}"></audio>'
        f'<p><a href="{url}">Enlace directo al audio</a></p>'
    )


def render_notification(
    kind: NotificationKind,
    record: RecordSnapshot,
    *,
    reason: str | None,
    transcript: str | None,
    links: ActionLinks,
) -> tuple[str, str, str]:
    """Return ``(subject, text_body, html_body)`` for one admin email."""

    if kind is NotificationKind.FLAGGED:
        subject = f"⚠️ Alerta de Moderación: Eco Detectado ({reason})"
        heading = (
            "<h1>Contenido Sospechoso Detectado</h1>"
            "<p>Un nuevo eco ha sido marcado por la IA por posible incumplimiento de políticas.</p>"
        )
    elif kind is NotificationKind.MANUAL_REVIEW:
        subject = "⚠️ Alerta: Cuota Excedida - Revisión Manual Requerida"
        heading = (
            "<h1>La moderación automática no está disponible</h1>"
            "<p>Un usuario ha subido un audio y no hemos podido moderarlo automáticamente.</p>"
        )
    else:
        subject = "⚠️ Error de Sistema: Moderación Omitida"
        heading = (
            "<h1>La moderación automática ha fallado</h1>"
            "<p><strong>Acción tomada:</strong> el eco se ha marcado como SEGURO "
            "automáticamente para no interrumpir el servicio.</p>"
        )

    html_body = (
        heading
        + _details(record, reason, transcript)
        + _player(record.file_url)
        + "<h3>Acciones:</h3>"
        + _action_buttons(links)
    )
    text_body = "\n".join(
        [
            subject,
            "",
            f"ID: {record.id}",
            f"Título: {record.title or 'Sin título'}",
            f"Autor: {record.author or 'Anónimo'}",
            f"Motivo: {reason or '-'}",
            f"Transcripción: {transcript or ''}",
            f"Audio: {record.file_url}",
            "",
            f"Mantener: {links.keep}",
            f"Eliminar: {links.delete}",
        ]
    )
    return subject, text_body, html_body


async def notify_admin(
    kind: NotificationKind,
    record: RecordSnapshot,
    *,
    reason: str | None,
    transcript: str | None,
) -> bool:
    """Email the moderation admin. Returns whether the message was accepted."""

    links = build_action_links(record.id)
    subject, text_body, html_body = render_notification(
        kind,
        record,
        reason=reason,
        transcript=transcript,
        links=links,
    )

    try:
        await send_email(
            recipient=settings.moderation.admin_email,
            subject=subject,
            body=text_body,
            html_body=html_body,
        )
    except EmailServiceError as exc:
        logger.error("Error sending moderation email record=%s: %s", record.id, exc)
        record_notification("failed")
        return False

    logger.info("Email de moderación enviado record=%s kind=%s", record.id, kind.value)
    record_notification("sent")
    return True


__all__ = ["ACTION_PATH", "ActionLinks", "build_action_links", "notify_admin", "render_notification"]
