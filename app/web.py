import html
import json
import logging

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse

from config import DEFAULT_MATCH, DEFAULT_POLICY, SEEDED_MATCHES
from store import MatchStore
from updates import UpdateRequest, apply_update

logger = logging.getLogger(__name__)

# === Match State ===
# One store per process; every request goes through it
store = MatchStore(SEEDED_MATCHES)
policy = DEFAULT_POLICY


# === FastAPI Application ===
app = FastAPI(title="Scoreboard Server")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception", exc_info=(type(exc), exc, exc.__traceback__))
    return PlainTextResponse("Internal error", status_code=500)


def _match_id(raw: str) -> str:
    return raw.strip("/") or DEFAULT_MATCH


@app.get("/api/state/{match_id:path}")
async def read_state(match_id: str):
    return JSONResponse(store.snapshot(_match_id(match_id)))


@app.post("/api/update/{match_id:path}")
async def update_state(match_id: str, request: Request):
    match_id = _match_id(match_id)
    body = await request.body()
    try:
        payload = json.loads(body) if body else {}
    except (ValueError, RecursionError):
        logger.debug("Update for %r is not JSON, treating as empty", match_id)
        payload = {}

    req = UpdateRequest.from_payload(payload)
    store.update(match_id, lambda state: apply_update(state, req, policy))
    return {"ok": True}


@app.get("/api/matches")
async def list_matches():
    return {"matches": store.ids()}


@app.get("/health")
async def health():
    return {"status": "healthy"}


# === Pages ===
@app.get("/", response_class=HTMLResponse)
async def home():
    links = "\n".join(
        f'    <li><a href="/control/{html.escape(m)}">Controllo {html.escape(m.upper())}</a></li>\n'
        f'    <li><a href="/display/{html.escape(m)}">Tabellone {html.escape(m.upper())}</a></li>'
        for m in SEEDED_MATCHES
    )
    return HTMLResponse(f"""<!doctype html>
<html lang="it">
<head><meta charset="utf-8"><title>Scoreboard</title></head>
<body style="background:#111;color:#fff;font-family:sans-serif;">
  <h1>Scoreboard</h1>
  <p>Collegati qui dal browser di un altro dispositivo sulla stessa rete.</p>
  <ul>
{links}
  </ul>
</body>
</html>""")


@app.get("/control/{match_id:path}", response_class=HTMLResponse)
async def control_page(match_id: str):
    return HTMLResponse(_render(CONTROL_PAGE, _match_id(match_id)))


@app.get("/display/{match_id:path}", response_class=HTMLResponse)
async def display_page(match_id: str):
    return HTMLResponse(_render(DISPLAY_PAGE, _match_id(match_id)))


def _render(page: str, match_id: str) -> str:
    return (page
            .replace("__TITLE__", html.escape(match_id))
            .replace("__MATCH__", json.dumps(match_id).replace("</", "<\\/")))


CONTROL_PAGE = """<!DOCTYPE html>
<html>
<head>
    <title>Controllo __TITLE__</title>
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <style>
        body { font-family: sans-serif; background: #111; color: #eee; text-align: center; padding: 20px; }
        button { font-size: 1.2rem; padding: 10px 20px; margin: 5px; cursor: pointer; border: none; border-radius: 5px; }
        .a { background: #00501e; color: white; }
        .b { background: #50001e; color: white; }
        .neutral { background: #444; color: white; }
        input { font-size: 1rem; padding: 5px; margin: 5px; width: 140px; text-align: center; }
    </style>
</head>
<body>
    <h2>__TITLE__</h2>
    <h1 id="score">0 - 0</h1>
    <p id="info"></p>
    <div>
        <button class="a" onclick="send({action:'score', team:'A', delta:1})">A +1</button>
        <button class="a" onclick="send({action:'score', team:'A', delta:-1})">A -1</button>
        <button class="a" onclick="send({action:'timeout', team:'A', delta:1})">A Timeout</button>
        <button class="a" onclick="send({action:'sub', team:'A', delta:1})">A Cambio</button>
        <br>
        <button class="b" onclick="send({action:'score', team:'B', delta:1})">B +1</button>
        <button class="b" onclick="send({action:'score', team:'B', delta:-1})">B -1</button>
        <button class="b" onclick="send({action:'timeout', team:'B', delta:1})">B Timeout</button>
        <button class="b" onclick="send({action:'sub', team:'B', delta:1})">B Cambio</button>
    </div>
    <br>
    <div>
        <input id="nameA" placeholder="Squadra A" onchange="updateNames()">
        <input id="nameB" placeholder="Squadra B" onchange="updateNames()">
    </div>
    <br>
    <div>
        <button class="neutral" onclick="send({action:'set_config', sideLeft: side === 'A' ? 'B' : 'A'})">Inverti lati</button>
        <button class="neutral" onclick="send({action:'reset_set'})">Reset set</button>
        <button class="neutral" onclick="send({action:'reset_match', keepNames:true})">Nuova partita</button>
    </div>

    <script>
        const match = __MATCH__;
        let side = 'A';

        async function send(msg) {
            await fetch('/api/update/' + encodeURIComponent(match), {
                method: 'POST',
                headers: {'Content-Type': 'application/json'},
                body: JSON.stringify(msg)
            });
            refresh();
        }

        function updateNames() {
            send({
                action: 'set_config',
                teamA_name: document.getElementById('nameA').value,
                teamB_name: document.getElementById('nameB').value
            });
        }

        async function refresh() {
            const s = await (await fetch('/api/state/' + encodeURIComponent(match))).json();
            side = s.sideLeft;
            document.getElementById('score').textContent =
                s.teamA_name + ' ' + s.teamA_score + ' - ' + s.teamB_score + ' ' + s.teamB_name;
            document.getElementById('info').textContent =
                'Set ' + s.current_set + ' | Set vinti ' + s.teamA_sets + '-' + s.teamB_sets +
                ' | Timeout ' + s.teamA_timeouts + '/' + s.max_timeouts + ' - ' + s.teamB_timeouts + '/' + s.max_timeouts +
                ' | Cambi ' + s.teamA_subs + '/' + s.max_subs + ' - ' + s.teamB_subs + '/' + s.max_subs;
        }

        refresh();
    </script>
</body>
</html>
"""


DISPLAY_PAGE = """<!DOCTYPE html>
<html>
<head>
    <title>Tabellone __TITLE__</title>
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <style>
        body { margin: 0; color: #fff; font-family: sans-serif; text-align: center; background-size: cover; }
        .row { display: flex; justify-content: space-around; align-items: center; height: 80vh; }
        .team img { max-height: 15vh; }
        .name { font-size: 6vw; }
        .score { font-size: 20vw; font-weight: bold; }
        .meta { font-size: 3vw; }
    </style>
</head>
<body>
    <div class="row">
        <div class="team" id="left"></div>
        <div class="meta" id="middle"></div>
        <div class="team" id="right"></div>
    </div>

    <script>
        const match = __MATCH__;

        function team(s, t) {
            const logo = s['logo' + t];
            return (logo ? '<img src="' + encodeURI(logo) + '"><br>' : '') +
                '<div class="name"></div><div class="score">' + s['team' + t + '_score'] + '</div>' +
                '<div class="meta">Set ' + s['team' + t + '_sets'] +
                ' | T ' + s['team' + t + '_timeouts'] + ' | C ' + s['team' + t + '_subs'] + '</div>';
        }

        function fill(el, s, t) {
            el.innerHTML = team(s, t);
            el.querySelector('.name').textContent = s['team' + t + '_name'];
        }

        async function poll() {
            try {
                const s = await (await fetch('/api/state/' + encodeURIComponent(match))).json();
                const left = s.sideLeft === 'B' ? 'B' : 'A';
                fill(document.getElementById('left'), s, left);
                fill(document.getElementById('right'), s, left === 'A' ? 'B' : 'A');
                document.getElementById('middle').textContent = 'Set ' + s.current_set;
                document.body.style.backgroundColor = s.bgColor;
                document.body.style.backgroundImage = s.bgImage ? 'url("' + encodeURI(s.bgImage) + '")' : 'none';
            } catch (e) {
                console.log(e);
            }
        }

        poll();
        setInterval(poll, 1000);
    </script>
</body>
</html>
"""
