from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from ..jobs.loop import RefreshLoop
from ._deps import get_refresh_loop

router = APIRouter()


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
@router.get("/panel", response_class=HTMLResponse)
async def panel(loop: RefreshLoop = Depends(get_refresh_loop)):
    # Self-contained page; polls /coins and patches only rows whose content changed.
    poll_ms = max(int(loop.interval * 1000), 500)
    return HTMLResponse(PANEL_HTML.replace("__POLL_MS__", str(poll_ms)))


PANEL_HTML = r"""
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width,initial-scale=1" />
  <title>Crypto Search</title>
  <style>
    :root { --bg:#0b1020; --surface:#111831; --ink:#e2e8f0; --muted:#94a3b8; --accent:#22d3ee; --danger:#f87171; }
    html,body{background:var(--bg); color:var(--ink); font-family:Inter,system-ui,-apple-system,Segoe UI,Roboto,Arial; margin:0;}
    .app{max-width:1100px; margin:0 auto; padding:24px 16px; text-align:center;}
    h1{font-weight:800; letter-spacing:-.02em;}
    input{width:min(420px,90%); padding:10px 14px; border-radius:10px; border:1px solid #334155; background:var(--surface); color:var(--ink); font-size:15px;}
    input:focus{outline:none; border-color:var(--accent);}
    table{width:100%; border-collapse:collapse; margin-top:20px; background:var(--surface); border-radius:12px; overflow:hidden;}
    th,td{padding:10px 12px; text-align:left; border-bottom:1px solid #1e293b; font-size:14px;}
    th{color:var(--muted); font-weight:600; text-transform:uppercase; font-size:11px; letter-spacing:.08em;}
    td.logo{display:flex; align-items:center; gap:10px;}
    td.logo img{width:28px; height:28px; background:#fff; border-radius:50%;}
    td.logo p{margin:0;}
    .error{color:var(--danger);}
    .muted{color:var(--muted);}
    @media (max-width: 760px){ .col-supply,.col-volume{display:none;} }
    @media (max-width: 520px){ .col-mcap,.col-symbol{display:none;} }
  </style>
</head>
<body>
  <div class="app">
    <h1>Crypto Search</h1>
    <input id="search" type="text" placeholder="Search..." autocomplete="off">
    <p id="loading" class="muted">Loading...</p>
    <p id="error" class="error" hidden></p>
    <p id="message" class="muted" hidden></p>
    <table id="table" hidden>
      <thead>
        <tr>
          <th>Rank</th><th>Name</th><th class="col-symbol">Symbol</th><th class="col-mcap">Market Cap</th>
          <th>Price</th><th class="col-supply">Available Supply</th><th class="col-volume">Volume(24hrs)</th>
        </tr>
      </thead>
      <tbody id="rows"></tbody>
    </table>
  </div>
  <script>
    const POLL_MS = __POLL_MS__;
    const rendered = new Map();
    const search = document.getElementById('search');
    const tbody = document.getElementById('rows');

    function cell(tr, text, cls){ const td = document.createElement('td'); if (cls) td.className = cls; td.textContent = text; tr.appendChild(td); }

    function buildRow(row){
      const tr = document.createElement('tr');
      cell(tr, row.rank, 'rank');
      const name = document.createElement('td'); name.className = 'logo';
      if (row.image){ const img = document.createElement('img'); img.src = row.image; img.alt = 'logo'; name.appendChild(img); }
      const p = document.createElement('p'); p.textContent = row.name; name.appendChild(p); tr.appendChild(name);
      cell(tr, row.symbol, 'col-symbol');
      cell(tr, row.market_cap, 'col-mcap');
      cell(tr, row.price);
      cell(tr, row.supply, 'col-supply');
      cell(tr, row.volume, 'col-volume');
      return tr;
    }

    function render(view){
      document.getElementById('loading').hidden = !view.loading;
      const err = document.getElementById('error');
      err.hidden = !view.error; err.textContent = view.error || '';
      const msg = document.getElementById('message');
      msg.hidden = !view.message; msg.textContent = view.message || '';
      document.getElementById('table').hidden = view.loading || view.rows.length === 0;

      const seen = new Set();
      let anchor = null;
      for (const row of view.rows){
        const key = JSON.stringify(row);
        seen.add(row.id);
        let entry = rendered.get(row.id);
        if (!entry || entry.key !== key){
          const tr = buildRow(row);
          if (entry) entry.el.replaceWith(tr);
          entry = {key, el: tr};
          rendered.set(row.id, entry);
        }
        const expected = anchor ? anchor.nextSibling : tbody.firstChild;
        if (expected !== entry.el) tbody.insertBefore(entry.el, expected);
        anchor = entry.el;
      }
      for (const [id, entry] of rendered){
        if (!seen.has(id)){ entry.el.remove(); rendered.delete(id); }
      }
    }

    async function refresh(){
      try {
        const res = await fetch('/coins?search=' + encodeURIComponent(search.value));
        if (res.ok) render(await res.json());
      } catch (e) {
        console.log('refresh failed', e);
      }
    }

    search.addEventListener('input', refresh);
    refresh();
    setInterval(refresh, POLL_MS);
  </script>
</body>
</html>
"""
