"""
HTML rendering for the dashboard pages.

Pages share one layout (render_page). All user-supplied text goes through
html.escape before it is interpolated.
"""

from calendar import month_name
from datetime import date
from html import escape
from typing import List, Optional, Sequence

from fastapi.responses import HTMLResponse

from jobtracker.dashboard.board import STATUS_COLUMNS, STATUS_LABELS, CalendarDay, DashboardState
from jobtracker.dashboard.session import AuthSession
from jobtracker.schemas.job import JobDetailResponse, JobResponse

STYLES = """
  :root { color-scheme: light; }
  * { box-sizing: border-box; }
  body { font-family: system-ui, -apple-system, "Segoe UI", sans-serif; margin: 0; background: #f8fafc; color: #0f172a; }
  .page { max-width: 1200px; margin: 0 auto; padding: 1.5rem 1rem 3rem; }
  header { display: flex; justify-content: space-between; align-items: center; margin-bottom: 1rem; }
  nav a { margin-right: 1rem; color: #2563eb; text-decoration: none; }
  .signed-in { color: #475569; font-size: 0.9rem; }
  .banner { background: #fef3c7; border: 1px solid #f59e0b; padding: 0.6rem 0.9rem; border-radius: 6px; margin-bottom: 0.75rem; }
  .banner.error { background: #fee2e2; border-color: #ef4444; }
  .board { display: grid; grid-template-columns: repeat(5, 1fr); gap: 0.75rem; }
  .column { background: #e2e8f0; border-radius: 8px; padding: 0.5rem; min-height: 300px; }
  .column h2 { font-size: 0.95rem; margin: 0.25rem 0 0.5rem; }
  .card { background: #fff; border-radius: 6px; padding: 0.5rem; margin-bottom: 0.5rem; box-shadow: 0 1px 2px rgba(0,0,0,0.08); cursor: grab; }
  .card .job-no { font-size: 0.75rem; color: #64748b; }
  .card form { margin-top: 0.35rem; display: flex; gap: 0.25rem; }
  .calendar { width: 100%; border-collapse: collapse; }
  .calendar td { vertical-align: top; border: 1px solid #cbd5e1; height: 90px; width: 14%; padding: 0.25rem; }
  .calendar td.other { background: #f1f5f9; color: #94a3b8; }
  .muted { color: #64748b; }
  .actions { display: flex; gap: 0.5rem; margin-top: 0.75rem; }
  dl.detail dt { font-weight: 600; margin-top: 0.5rem; }
  dl.detail dd { margin: 0; }
"""

BOARD_SCRIPT = """
<script>
(function () {
  var banner = document.getElementById('sync-warning');
  function warn(text) {
    banner.textContent = text;
    banner.style.display = 'block';
  }
  document.querySelectorAll('.card').forEach(function (card) {
    card.addEventListener('dragstart', function (event) {
      event.dataTransfer.setData('text/plain', card.dataset.jobId);
    });
  });
  document.querySelectorAll('.column').forEach(function (column) {
    column.addEventListener('dragover', function (event) { event.preventDefault(); });
    column.addEventListener('drop', function (event) {
      event.preventDefault();
      var jobId = event.dataTransfer.getData('text/plain');
      var card = document.querySelector('.card[data-job-id="' + jobId + '"]');
      if (!card || card.parentNode === column) { return; }
      column.appendChild(card);
      fetch('/dashboard/jobs/' + jobId + '/status', {
        method: 'POST',
        headers: { 'Content-Type': 'application/json' },
        body: JSON.stringify({ status: column.dataset.status })
      }).then(function (response) {
        return response.json();
      }).then(function (payload) {
        if (payload.warning) { warn(payload.warning); }
      }).catch(function () {
        warn('The status change could not be saved. The board may be out of date.');
      });
    });
  });
})();
</script>
"""


def render_page(
    title: str,
    body: str,
    session: Optional[AuthSession] = None,
    warnings: Sequence[str] = (),
    status_code: int = 200
) -> HTMLResponse:
    """
    Shared layout: nav bar, signed-in line and warning banners.
    """
    if session is not None and session.email:
        role = session.role.value if session.role else "role unavailable"
        account = f"""
          <span class="signed-in">Signed in as <strong>{escape(session.email)}</strong> ({escape(role)})</span>
          <form method="post" action="/logout" style="display:inline"><button type="submit">Log out</button></form>
        """
        nav = '<nav><a href="/dashboard">Board</a><a href="/dashboard/calendar">Calendar</a></nav>'
    else:
        account = '<a href="/login">Log in</a>'
        nav = "<nav></nav>"

    banners = "".join(f'<div class="banner" role="alert">{escape(text)}</div>' for text in warnings)

    html = f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8" />
    <title>{escape(title)} · Job Tracker</title>
    <style>{STYLES}</style>
  </head>
  <body>
    <div class="page">
      <header>
        {nav}
        <div>{account}</div>
      </header>
      {banners}
      <div id="sync-warning" class="banner" role="alert" style="display:none"></div>
      {body}
    </div>
  </body>
</html>"""
    return HTMLResponse(content=html, status_code=status_code)


def _status_options(selected) -> str:
    return "".join(
        f'<option value="{status.value}"{" selected" if status == selected else ""}>{label}</option>'
        for status, label in STATUS_COLUMNS
    )


def _card(job: JobResponse) -> str:
    due = f'<div class="muted">In hands {job.in_hands_date.isoformat()}</div>' if job.in_hands_date else ""
    owner = f'<div class="muted">{escape(job.owner)}</div>' if job.owner else ""
    return f"""
      <div class="card" draggable="true" data-job-id="{job.id}">
        <div class="job-no">{escape(job.job_no)}{" · " + escape(job.priority) if job.priority else ""}</div>
        <a href="/dashboard/jobs/{job.id}">{escape(job.title)}</a>
        {due}{owner}
        <form method="post" action="/dashboard/jobs/{job.id}/status">
          <select name="status">{_status_options(job.status)}</select>
          <button type="submit">Move</button>
        </form>
      </div>"""


def render_board(state: DashboardState, session: AuthSession) -> HTMLResponse:
    columns = []
    for status, jobs in state.columns().items():
        cards = "".join(_card(job) for job in jobs) or '<p class="muted">No jobs</p>'
        columns.append(f"""
      <section class="column" data-status="{status.value}">
        <h2>{STATUS_LABELS[status]} <span class="muted">({len(jobs)})</span></h2>
        {cards}
      </section>""")

    toggle_href = "/dashboard" if state.mine_only else "/dashboard?mine=1"
    toggle_label = "Show all jobs" if state.mine_only else "Show my jobs"
    body = f"""
      <h1>Jobs</h1>
      <p><a href="{toggle_href}">{toggle_label}</a></p>
      <div class="board">{"".join(columns)}</div>
      {BOARD_SCRIPT}
    """
    return render_page("Board", body, session=session, warnings=state.warnings)


def render_calendar(
    year: int,
    month: int,
    weeks: List[List[CalendarDay]],
    session: AuthSession,
    warnings: Sequence[str] = (),
    mine_only: bool = False
) -> HTMLResponse:
    prev_year, prev_month = (year - 1, 12) if month == 1 else (year, month - 1)
    next_year, next_month = (year + 1, 1) if month == 12 else (year, month + 1)
    mine = "&mine=1" if mine_only else ""
    toggle_href = f"/dashboard/calendar?year={year}&month={month}{'' if mine_only else '&mine=1'}"
    toggle_label = "Show all jobs" if mine_only else "Show my jobs"

    rows = []
    for week in weeks:
        cells = []
        for cell in week:
            jobs = "".join(
                f'<div><a href="/dashboard/jobs/{job.id}">{escape(job.job_no)}</a> {escape(job.title)}</div>'
                for job in cell.jobs
            )
            css = "" if cell.in_month else ' class="other"'
            cells.append(f"<td{css}><div>{cell.day.day}</div>{jobs}</td>")
        rows.append(f"<tr>{''.join(cells)}</tr>")

    headings = "".join(f"<th>{name}</th>" for name in ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"))
    body = f"""
      <h1>{month_name[month]} {year}</h1>
      <p>
        <a href="/dashboard/calendar?year={prev_year}&month={prev_month}{mine}">&larr; Previous</a>
        <a href="/dashboard/calendar?year={next_year}&month={next_month}{mine}">Next &rarr;</a>
      </p>
      <p><a href="{toggle_href}">{toggle_label}</a></p>
      <table class="calendar">
        <thead><tr>{headings}</tr></thead>
        <tbody>{"".join(rows)}</tbody>
      </table>
    """
    return render_page("Calendar", body, session=session, warnings=warnings)


def render_job_detail(job: JobDetailResponse, session: AuthSession, warnings: Sequence[str] = ()) -> HTMLResponse:
    activities = "".join(
        f"""<li>
          <span class="muted">{escape(activity.created_at.isoformat() if activity.created_at else "")} · {escape(activity.source)}</span>
          <div>{escape(activity.snippet or "")}</div>
          {f'<a href="{escape(activity.gmail_link)}" target="_blank" rel="noopener">Open email</a>' if activity.gmail_link else ""}
        </li>"""
        for activity in job.activities
    ) or '<li class="muted">No activity yet</li>'

    def field(label: str, value) -> str:
        shown = escape(str(value)) if value not in (None, "") else '<span class="muted">Not set</span>'
        return f"<dt>{label}</dt><dd>{shown}</dd>"

    body = f"""
      <h1>{escape(job.title)}</h1>
      <dl class="detail">
        {field("Job number", job.job_no)}
        {field("Status", STATUS_LABELS.get(job.status, job.status))}
        {field("In hands", job.in_hands_date.isoformat() if job.in_hands_date else None)}
        {field("Owner", job.owner)}
        {field("Priority", job.priority)}
        {field("Estimate / SO", job.est_so_no)}
      </dl>
      <form method="post" action="/dashboard/jobs/{job.id}/status">
        <select name="status">{_status_options(job.status)}</select>
        <button type="submit">Update status</button>
      </form>
      <h2>Activity</h2>
      <ul>{activities}</ul>
    """
    return render_page(job.title, body, session=session, warnings=warnings)


def render_login(
    next_path: str,
    error: Optional[str] = None,
    message: Optional[str] = None,
    email: str = "",
    code_sent: bool = False,
    status_code: int = 200
) -> HTMLResponse:
    notices = []
    if error:
        notices.append(f'<div class="banner error" role="alert">{escape(error)}</div>')
    if message:
        notices.append(f'<div class="banner">{escape(message)}</div>')

    if code_sent:
        form = f"""
      <form method="post" action="/login/verify">
        <input type="hidden" name="next" value="{escape(next_path)}" />
        <input type="hidden" name="email" value="{escape(email)}" />
        <p><label>Sign-in code<br /><input type="text" name="code" inputmode="numeric" autocomplete="one-time-code" required /></label></p>
        <button type="submit">Sign in</button>
      </form>"""
    else:
        form = f"""
      <form method="post" action="/login">
        <input type="hidden" name="next" value="{escape(next_path)}" />
        <p><label>Email<br /><input type="email" name="email" value="{escape(email)}" required /></label></p>
        <p><label>Password<br /><input type="password" name="password" /></label></p>
        <p class="muted">Leave the password empty to get a sign-in code by email.</p>
        <button type="submit">Continue</button>
      </form>"""

    body = f"""
      <h1>Sign in</h1>
      {"".join(notices)}
      {form}
    """
    return render_page("Sign in", body, status_code=status_code)


def render_checking(session: AuthSession) -> HTMLResponse:
    error = f'<p class="muted">{escape(session.error)}</p>' if session.error else ""
    body = f"""
      <h1>Still working…</h1>
      <p>The authentication check is taking longer than expected. You can retry or reset your session.</p>
      {error}
      <div class="actions">
        <a href="{escape(session.requested_path)}">Retry</a>
        <form method="post" action="/logout"><button type="submit">Reset session</button></form>
      </div>
    """
    return render_page("Checking your session", body, status_code=503)


def render_denied(session: AuthSession) -> HTMLResponse:
    body = """
      <h1>Access restricted</h1>
      <p>You do not have permission to view this section.</p>
    """
    return render_page("Access restricted", body, session=session, status_code=403)


def render_not_found(session: AuthSession, message: str) -> HTMLResponse:
    body = f"<h1>Not found</h1><p>{escape(message)}</p>"
    return render_page("Not found", body, session=session, status_code=404)


def current_month(today: Optional[date] = None):
    today = today or date.today()
    return today.year, today.month
