"""HTML confirmation pages served after an admin clicks an email link."""

from __future__ import annotations

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="es">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <style>
        body {{
            font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif;
            background-color: #f3f4f6;
            display: flex;
            justify-content: center;
            align-items: center;
            height: 100vh;
            margin: 0;
        }}
        .card {{
            background: white;
            padding: 2rem;
            border-radius: 1rem;
            box-shadow: 0 4px 6px -1px rgba(0, 0, 0, 0.1), 0 2px 4px -1px rgba(0, 0, 0, 0.06);
            text-align: center;
            max-width: 400px;
            width: 90%;
        }}
        .icon {{
            color: {accent};
            font-size: 4rem;
            margin-bottom: 1rem;
        }}
        h1 {{
            color: #111827;
            font-size: 1.5rem;
            margin-bottom: 0.5rem;
        }}
        p {{
            color: #6b7280;
            margin-bottom: 1.5rem;
            line-height: 1.5;
        }}
    </style>
</head>
<body>
    <div class="card">
        <div class="icon">{icon}</div>
        <h1>{title}</h1>
        <p>{message}</p>
    </div>
</body>
</html>
"""


def _render(*, title: str, icon: str, accent: str, message: str) -> str:
    return _PAGE_TEMPLATE.format(title=title, icon=icon, accent=accent, message=message)


DELETED_PAGE = _render(
    title="Eco Eliminado",
    icon="🗑️",
    accent="#ef4444",
    message="El audio ha sido eliminado correctamente del sistema y ya no estará disponible.",
)

KEPT_PAGE = _render(
    title="Eco Aprobado",
    icon="✅",
    accent="#22c55e",
    message="El audio ha sido marcado como seguro y permanecerá en el sistema.",
)


__all__ = ["DELETED_PAGE", "KEPT_PAGE"]
