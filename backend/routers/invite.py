"""Invite routes: the visitor-facing family room reached through an invite link.

No account is needed here. The token in the URL is the only credential,
and it grants exactly two things: viewing the family's public artworks and
writing to its guestbook.
"""

import html

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse

from backend.errors import remote_failure
from backend.models.invite import GuestbookCreate, GuestbookEntry, InviteView
from backend.remote.base import RemoteBackend, RemoteError
from backend.remote.lifecycle import get_remote
from backend.services.invite_service import (
    GuestbookInputError,
    InvalidInvite,
    add_guestbook_entry,
    resolve_invite,
)
from backend.services.made_at import local_zone
from backend.services.visibility import parse_timestamp

router = APIRouter(tags=["invite"])

INVALID_LINK_MESSAGE = "초대 링크가 올바르지 않습니다."
EMPTY_MESSAGE = "표시할 작품이 아직 없어요."


async def load_invite(remote: RemoteBackend, token: str) -> InviteView:
    try:
        data = await resolve_invite(remote, token)
    except InvalidInvite:
        return InviteView(status="invalid", message=INVALID_LINK_MESSAGE)
    if not data["artworks"]:
        return InviteView(status="empty", message=EMPTY_MESSAGE, entries=data["entries"])
    return InviteView(status="ok", artworks=data["artworks"], entries=data["entries"])


# ── JSON API ─────────────────────────────────────────────────────────────────

@router.get("/api/invite/{token}", response_model=InviteView)
async def invite_view(token: str, remote: RemoteBackend = Depends(get_remote)):
    """Artworks and guestbook for an invite link. ``status`` is ``invalid`` for bad links."""
    return await load_invite(remote, token)


@router.post("/api/invite/{token}/guestbook", response_model=GuestbookEntry)
async def leave_message(
    token: str,
    req: GuestbookCreate,
    remote: RemoteBackend = Depends(get_remote),
):
    """Write a guestbook message. Anyone holding the link may do this."""
    try:
        return await add_guestbook_entry(remote, token, req.display_name, req.content)
    except GuestbookInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InvalidInvite:
        raise HTTPException(status_code=404, detail=INVALID_LINK_MESSAGE)
    except RemoteError as e:
        raise remote_failure("등록 실패", e)


# ── Server-rendered page ─────────────────────────────────────────────────────

@router.get("/invite/{token}")
async def invite_page(token: str, remote: RemoteBackend = Depends(get_remote)):
    """The page relatives open from the invite link."""
    view = await load_invite(remote, token)
    if view.status == "invalid":
        return HTMLResponse(
            content=_render_error_page("가족 전시관", view.message),
            status_code=404,
        )
    return HTMLResponse(content=_render_invite_page(token, view))


# ── HTML Templates ───────────────────────────────────────────────────────────

def _fmt(iso: str | None) -> str:
    dt = parse_timestamp(iso)
    if dt is None:
        return "-"
    return dt.astimezone(local_zone()).strftime("%Y. %m. %d. %H:%M")


def _render_artworks(view: InviteView) -> str:
    if not view.artworks:
        return """<div class="empty">
            <div class="empty-title">표시할 작품이 없어요</div>
            <div class="empty-desc">가족이 작품을 공개하면 여기에 표시돼요.</div>
        </div>"""
    cards = []
    for a in view.artworks:
        cards.append(f"""<article class="card">
            <div class="meta"><span class="kid">{_esc(a.kid_name)}</span>
            <span class="when">{_esc(_fmt(a.artwork_made_at or a.created_at))}</span></div>
            <div class="title">{_esc(a.title)}</div>
            <a href="{_esc(a.image_url)}" target="_blank" rel="noreferrer">
                <img src="{_esc(a.image_url)}" alt="{_esc(a.title)}" loading="lazy">
            </a>
        </article>""")
    return f'<div class="grid">{"".join(cards)}</div>'


def _render_entries(view: InviteView) -> str:
    if not view.entries:
        return '<div class="empty-desc">아직 방명록이 없어요.</div>'
    items = []
    for e in view.entries:
        items.append(f"""<div class="entry">
            <div class="who">{_esc(e.display_name)} <span class="when">{_esc(_fmt(e.created_at))}</span></div>
            <div class="content">{_esc(e.content)}</div>
        </div>""")
    return "".join(items)


def _render_invite_page(token: str, view: InviteView) -> str:
    """Render a minimal, self-contained page for the invite link."""
    notice = f'<div class="notice">{_esc(view.message)}</div>' if view.message else ""
    post_url = f"/api/invite/{html.escape(token)}/guestbook"

    return f"""<!DOCTYPE html>
<html lang="ko">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <meta name="robots" content="noindex">
    <title>가족 전시관</title>
    <style>
        * {{ margin: 0; padding: 0; box-sizing: border-box; }}
        body {{ background: #fff; color: #111827; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; }}
        .wrap {{ max-width: 1040px; margin: 0 auto; padding: 38px; }}
        .eyebrow {{ font-size: 11px; letter-spacing: 0.18em; color: #6b7280; }}
        h1 {{ margin: 6px 0; font-size: 28px; letter-spacing: -0.6px; }}
        .desc {{ color: #6b7280; font-size: 14px; }}
        .notice {{ margin-top: 14px; padding: 10px 12px; border-radius: 12px; background: #f9fafb; border: 1px solid #eef0f3; font-size: 13px; }}
        .section {{ margin-top: 24px; }}
        .sec-title {{ font-weight: 900; margin-bottom: 10px; }}
        .grid {{ display: grid; grid-template-columns: repeat(auto-fill, minmax(240px, 1fr)); gap: 14px; }}
        .card {{ border: 1px solid #e8ebf0; border-radius: 16px; padding: 12px; }}
        .card img {{ width: 100%; border-radius: 12px; margin-top: 8px; }}
        .meta {{ display: flex; justify-content: space-between; font-size: 12px; color: #6b7280; }}
        .kid {{ font-weight: 800; color: #111827; }}
        .title {{ font-weight: 900; margin-top: 4px; }}
        .entry {{ border: 1px solid #eef0f3; border-radius: 14px; padding: 10px 12px; margin-bottom: 8px; }}
        .who {{ font-weight: 800; font-size: 13px; }}
        .when {{ color: #9ca3af; font-weight: 400; font-size: 12px; }}
        .content {{ margin-top: 6px; white-space: pre-wrap; font-size: 14px; }}
        .empty-title {{ font-weight: 900; }}
        .empty-desc {{ color: #6b7280; font-size: 13px; }}
        form {{ display: grid; gap: 8px; margin-bottom: 12px; }}
        input, textarea {{ padding: 10px 12px; border: 1px solid #e5e7eb; border-radius: 12px; font-size: 14px; }}
        button {{ padding: 10px 12px; border-radius: 12px; border: 0; background: #111827; color: #fff; font-weight: 900; cursor: pointer; }}
    </style>
</head>
<body>
    <main class="wrap">
        <div class="eyebrow">INVITE</div>
        <h1>가족 전시관</h1>
        <p class="desc">작품을 보고, 따뜻한 말을 남겨주세요 🙂</p>

        {notice}

        <section class="section">
            <div class="sec-title">작품</div>
            {_render_artworks(view)}
        </section>

        <section class="section">
            <div class="sec-title">방명록</div>
            <form id="guestbook" data-action="{post_url}">
                <input name="display_name" maxlength="50" placeholder="이름" required>
                <textarea name="content" rows="3" maxlength="1000" placeholder="남기고 싶은 말" required></textarea>
                <button type="submit">남기기</button>
            </form>
            <div id="entries">{_render_entries(view)}</div>
        </section>
    </main>
    <script>
        document.getElementById("guestbook").addEventListener("submit", async (ev) => {{
            ev.preventDefault();
            const form = ev.target;
            const body = {{
                display_name: form.display_name.value.trim(),
                content: form.content.value.trim(),
            }};
            if (!body.display_name || !body.content) {{
                alert("이름과 내용을 입력해 주세요.");
                return;
            }}
            const btn = form.querySelector("button");
            btn.disabled = true;
            const resp = await fetch(form.dataset.action, {{
                method: "POST",
                headers: {{ "Content-Type": "application/json" }},
                body: JSON.stringify(body),
            }});
            btn.disabled = false;
            if (!resp.ok) {{
                const err = await resp.json().catch(() => ({{}}));
                alert(err.detail || "등록 실패");
                return;
            }}
            location.reload();
        }});
    </script>
</body>
</html>"""


def _render_error_page(title: str, message: str) -> str:
    """Render the terminal "invalid link" page."""
    return f"""<!DOCTYPE html>
<html lang="ko">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <meta name="robots" content="noindex">
    <title>{_esc(title)}</title>
    <style>
        body {{ background: #fff; color: #111827; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; display: flex; align-items: center; justify-content: center; min-height: 100vh; }}
        .error {{ text-align: center; }}
        h1 {{ margin-bottom: 8px; }}
        p {{ color: #6b7280; }}
    </style>
</head>
<body>
    <div class="error">
        <h1>{_esc(title)}</h1>
        <p>{_esc(message)}</p>
    </div>
</body>
</html>"""


def _esc(s: str) -> str:
    """HTML-escape a string."""
    return html.escape(str(s)) if s else ""
