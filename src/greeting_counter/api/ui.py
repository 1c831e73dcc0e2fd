"""Browser client served from the API process."""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["ui"])


@router.get("/", response_class=HTMLResponse)
async def client_ui() -> HTMLResponse:
    """Tabbed post/list/ranking page that talks to the REST and WebSocket API."""
    return HTMLResponse(_CLIENT_UI_HTML)


_CLIENT_UI_HTML = """<!doctype html>
<html lang="ja">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>ロマ子のあるある挨拶カウンター</title>
    <style>
      body { font-family: ui-sans-serif, system-ui, sans-serif; margin: 0;
             background: #f3f4f6; color: #1f2937; }
      .container { max-width: 56rem; margin: 0 auto; padding: 1.5rem 1rem; }
      header { text-align: center; margin-bottom: 1.5rem; }
      nav { display: flex; justify-content: center; gap: 0.5rem;
            margin-bottom: 1.5rem; }
      nav button { padding: 0.5rem 1rem; border: 0; border-radius: 0.5rem;
                   background: #e5e7eb; cursor: pointer; }
      nav button.active { background: #3b82f6; color: white; }
      .card { background: white; padding: 1.25rem; border-radius: 0.5rem;
              box-shadow: 0 1px 3px rgba(0,0,0,0.1); margin-bottom: 1rem; }
      .entry { border: 1px solid #e5e7eb; border-radius: 0.5rem;
               padding: 0.75rem; margin-bottom: 0.75rem; }
      .meta { font-size: 0.8rem; color: #6b7280; }
      .badge { background: #dbeafe; color: #1e40af; border-radius: 999px;
               padding: 0.1rem 0.5rem; font-size: 0.8rem; }
      .message.success { color: #15803d; }
      .message.error { color: #b91c1c; }
      textarea, input { width: 100%; box-sizing: border-box; padding: 0.5rem;
                        margin-bottom: 0.5rem; }
      .hidden { display: none; }
    </style>
  </head>
  <body>
    <div class="container">
      <header>
        <h1>ロマ子のあるある挨拶カウンター</h1>
        <p>「ロマ子のあるある挨拶」を投稿してカウントしよう！</p>
      </header>
      <nav>
        <button data-tab="post" class="active">投稿</button>
        <button data-tab="list">一覧</button>
        <button data-tab="ranking">ランキング</button>
      </nav>
      <main>
        <section class="card" id="login">
          <div id="login-form">
            <h2>ユーザー登録</h2>
            <p class="meta">投稿するには名前を入力してください</p>
            <input id="name" type="text" placeholder="あなたの名前を入力" />
            <div id="login-error" class="message error"></div>
            <button id="login-button">登録して開始</button>
          </div>
          <div id="login-status" class="hidden">
            <strong>ログイン中</strong> <span id="current-name"></span>
            <button id="logout-button">ログアウト</button>
          </div>
        </section>
        <section class="card" id="view-post">
          <h2>テキスト投稿</h2>
          <textarea id="text" rows="3"
            placeholder="「ロマ子のあるある挨拶」を含むテキストを入力してください"></textarea>
          <button id="post-button">保存</button>
          <div id="post-message" class="message"></div>
        </section>
        <section class="card hidden" id="view-list"></section>
        <section class="card hidden" id="view-ranking"></section>
      </main>
    </div>
    <script>
      const state = {
        tab: 'post',
        refreshKey: 0,
        loadedKey: { list: -1, ranking: -1 },
        user: null,
        socket: null,
        entries: { list: [], ranking: [] },
        errors: { list: '', ranking: '' },
      };
      const FETCH_ERRORS = {
        list: 'データの取得に失敗しました',
        ranking: 'ランキングの取得に失敗しました',
      };

      function byUpdatedDesc(a, b) {
        return new Date(b.updatedAt) - new Date(a.updatedAt);
      }
      function byCountDesc(a, b) {
        if (b.count !== a.count) return b.count - a.count;
        return byUpdatedDesc(a, b);
      }
      const SORTERS = { list: byUpdatedDesc, ranking: byCountDesc };

      function mergeEntry(kind, incoming) {
        const entries = state.entries[kind].slice();
        const index = entries.findIndex((e) => e.text === incoming.text);
        if (index >= 0) {
          entries[index] = incoming;
        } else {
          entries.push(incoming);
        }
        state.entries[kind] = entries.sort(SORTERS[kind]);
      }

      function escapeHtml(value) {
        const div = document.createElement('div');
        div.textContent = value == null ? '' : String(value);
        return div.innerHTML;
      }
      function formatDate(value) {
        return new Date(value).toLocaleString('ja-JP', {
          year: 'numeric', month: '2-digit', day: '2-digit',
          hour: '2-digit', minute: '2-digit',
        });
      }
      function rankLabel(rank) {
        return { 1: '🥇', 2: '🥈', 3: '🥉' }[rank] || rank + '位';
      }

      async function request(method, path, body) {
        const res = await fetch('/api' + path, {
          method,
          headers: { 'Content-Type': 'application/json' },
          body: body === undefined ? undefined : JSON.stringify(body),
        });
        const data = await res.json().catch(() => null);
        if (!res.ok) {
          const error = new Error('Error: ' + res.status);
          if (data && data.message) {
            error.message = data.message;
            error.fromServer = true;
          }
          throw error;
        }
        return data;
      }

      function sendJoin() {
        const socket = state.socket;
        if (!socket || socket.readyState !== WebSocket.OPEN || !state.user) return;
        socket.send(JSON.stringify({
          event: 'join',
          data: { userId: state.user.id, userName: state.user.name },
        }));
      }
      function connectSocket() {
        if (state.socket) return;
        const scheme = location.protocol === 'https:' ? 'wss' : 'ws';
        const socket = new WebSocket(scheme + '://' + location.host + '/api/ws');
        socket.onopen = sendJoin;
        socket.onmessage = (message) => {
          const frame = JSON.parse(message.data);
          if (frame.event !== 'entryCreated') return;
          mergeEntry('list', frame.data);
          mergeEntry('ranking', frame.data);
          renderView(state.tab);
        };
        socket.onclose = () => { state.socket = null; };
        state.socket = socket;
      }
      function disconnectSocket() {
        if (state.socket) {
          state.socket.close();
          state.socket = null;
        }
      }

      function setUser(user) {
        state.user = user;
        if (user) {
          localStorage.setItem('currentUser', JSON.stringify(user));
          connectSocket();
          sendJoin();
        } else {
          localStorage.removeItem('currentUser');
          disconnectSocket();
        }
        renderLogin();
      }
      function restoreUser() {
        const saved = localStorage.getItem('currentUser');
        if (!saved) return;
        try {
          setUser(JSON.parse(saved));
        } catch (error) {
          localStorage.removeItem('currentUser');
        }
      }

      function renderLogin() {
        document.getElementById('login-form').classList.toggle('hidden', !!state.user);
        document.getElementById('login-status').classList.toggle('hidden', !state.user);
        document.getElementById('current-name').textContent =
          state.user ? state.user.name : '';
      }

      async function loadView(kind) {
        connectSocket();
        const target = document.getElementById('view-' + kind);
        target.innerHTML = '<p class="meta">読み込み中...</p>';
        try {
          state.entries[kind] = await request('GET', kind === 'list' ? '/entries' : '/ranking');
          state.errors[kind] = '';
        } catch (error) {
          state.errors[kind] = FETCH_ERRORS[kind];
        }
        state.loadedKey[kind] = state.refreshKey;
        renderView(kind);
      }

      function renderView(kind) {
        if (kind === 'post') return;
        const target = document.getElementById('view-' + kind);
        if (state.errors[kind]) {
          target.innerHTML = '<p class="message error">' + state.errors[kind] +
            '</p><button id="retry-' + kind + '">再試行</button>';
          document.getElementById('retry-' + kind).onclick = () => loadView(kind);
          return;
        }
        const title = kind === 'list' ? '投稿一覧' : 'ランキング';
        const entries = state.entries[kind];
        if (!entries.length) {
          target.innerHTML = '<h2>' + title + '</h2><p class="meta">' +
            (kind === 'list' ? 'まだ投稿がありません' : 'まだランキングデータがありません') + '</p>';
          return;
        }
        target.innerHTML = '<h2>' + title + '</h2>' + entries.map((entry, index) => {
          const author = entry.userName
            ? '<div class="meta">投稿者: ' + escapeHtml(entry.userName) + '</div>' : '';
          const lead = kind === 'ranking' ? '<strong>' + rankLabel(index + 1) + '</strong> ' : '';
          const count = kind === 'ranking'
            ? '<span class="badge">' + entry.count + '回</span>'
            : '<span class="badge">カウント: ' + entry.count + '</span>';
          const updated = entry.createdAt !== entry.updatedAt
            ? ' 最終更新: ' + formatDate(entry.updatedAt) : '';
          return '<div class="entry">' + lead + escapeHtml(entry.text) + ' ' + count +
            author + '<div class="meta">投稿日時: ' + formatDate(entry.createdAt) +
            updated + '</div></div>';
        }).join('');
      }

      function selectTab(tab) {
        state.tab = tab;
        document.querySelectorAll('nav button').forEach((button) => {
          button.classList.toggle('active', button.dataset.tab === tab);
        });
        ['post', 'list', 'ranking'].forEach((name) => {
          document.getElementById('view-' + name).classList.toggle('hidden', name !== tab);
        });
        if (tab !== 'post' && state.loadedKey[tab] !== state.refreshKey) {
          loadView(tab);
        } else {
          renderView(tab);
        }
      }

      function showPostMessage(text, kind) {
        const box = document.getElementById('post-message');
        box.textContent = text;
        box.className = 'message ' + kind;
      }

      async function submitPost() {
        const field = document.getElementById('text');
        if (!state.user) return showPostMessage('ログインが必要です', 'error');
        const text = field.value.trim();
        if (!text) return showPostMessage('テキストを入力してください', 'error');
        try {
          await request('POST', '/entries', {
            text, userId: state.user.id, userName: state.user.name,
          });
          showPostMessage('保存されました！', 'success');
          field.value = '';
          state.refreshKey += 1;
        } catch (error) {
          showPostMessage(error.fromServer ? error.message : 'エラーが発生しました', 'error');
        }
      }

      async function login() {
        const input = document.getElementById('name');
        const name = input.value.trim();
        if (!name) return;
        const errorBox = document.getElementById('login-error');
        errorBox.textContent = '';
        try {
          const response = await request('POST', '/users', { name });
          input.value = '';
          setUser(response.user);
        } catch (error) {
          errorBox.textContent = error.fromServer
            ? error.message : 'ユーザー作成中にエラーが発生しました';
        }
      }

      document.querySelectorAll('nav button').forEach((button) => {
        button.onclick = () => selectTab(button.dataset.tab);
      });
      document.getElementById('post-button').onclick = submitPost;
      document.getElementById('login-button').onclick = login;
      document.getElementById('logout-button').onclick = () => setUser(null);
      restoreUser();
      renderLogin();
    </script>
  </body>
</html>
"""
