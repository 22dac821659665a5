import html
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse
from pydantic import ValidationError

from ..schemas import DashboardRender, SelectionUpdate
from ..view import DashboardView

router = APIRouter(tags=["dashboard"])

RANGE_OPTIONS = [7, 30, 90, 120, 365]

def get_view(request: Request) -> DashboardView:
    return request.app.state.dashboard

@router.get("/dashboard/state", response_model=DashboardRender)
async def dashboard_state(view: DashboardView = Depends(get_view)):
    return view.render()

@router.post("/dashboard/selection", response_model=DashboardRender)
async def dashboard_selection(update: SelectionUpdate, view: DashboardView = Depends(get_view)):
    """Change coins and/or range. The fetch runs once the selection settles."""
    try:
        view.update(coins=update.coins, range_days=update.range_days)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False, include_input=False))
    return view.render()

@router.post("/dashboard/refresh", response_model=DashboardRender)
async def dashboard_refresh(wait: bool = False, view: DashboardView = Depends(get_view)):
    view.refresh()
    if wait:
        await view.orchestrator.wait()
    return view.render()

@router.get("/", response_class=HTMLResponse)
async def dashboard_page(view: DashboardView = Depends(get_view)):
    options = "".join(
        f'<option value="{d}"{" selected" if d == view.range_days else ""}>{d} days</option>'
        for d in RANGE_OPTIONS
    )
    return PAGE.replace("{{coins}}", html.escape(", ".join(view.coins))).replace("{{options}}", options)

PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>Coinboard</title>
  <script src="https://cdn.jsdelivr.net/npm/chart.js@4"></script>
</head>
<body style="text-align:center; margin-top:50px; font-family:sans-serif">
  <h1>Crypto Price + History</h1>
  <input id="coins" type="text" value="{{coins}}" placeholder="bitcoin, ethereum" style="padding:8px; font-size:16px" />
  <select id="range" style="padding:8px">{{options}}</select>
  <button id="refresh" style="padding:8px 16px">Get Data</button>
  <div style="margin-top:20px">
    <p id="status"></p>
    <p id="price"></p>
    <div style="width:90%; margin:auto"><canvas id="chart" height="300"></canvas></div>
  </div>
<script>
const chart = new Chart(document.getElementById("chart"), {type: "line", data: {labels: [], datasets: []}});

function selection() {
  return {
    coins: document.getElementById("coins").value.split(",").map(c => c.trim()).filter(c => c),
    range_days: parseInt(document.getElementById("range").value, 10),
  };
}

function render(s) {
  const status = document.getElementById("status");
  status.style.color = s.error ? "red" : "";
  status.textContent = s.loading ? "Loading..." : (s.error || "");
  document.getElementById("price").textContent =
    s.price !== null ? `Current ${s.shown_coins[0].toUpperCase()} Price: $${s.price.toLocaleString("en-US")}` : "";
  chart.data.labels = s.rows.map(r => r.date);
  chart.data.datasets = s.shown_coins.map(c => ({label: c, data: s.rows.map(r => (c in r ? r[c] : null)), spanGaps: false}));
  chart.update();
}

async function post(url, body) {
  const res = await fetch(url, {method: "POST", headers: {"Content-Type": "application/json"}, body: JSON.stringify(body)});
  if (res.ok) render(await res.json());
}

document.getElementById("coins").addEventListener("input", () => post("/dashboard/selection", selection()));
document.getElementById("range").addEventListener("change", () => post("/dashboard/selection", selection()));
document.getElementById("refresh").addEventListener("click", () => post("/dashboard/refresh", {}));
setInterval(async () => render(await (await fetch("/dashboard/state")).json()), 1000);
</script>
</body>
</html>
"""
