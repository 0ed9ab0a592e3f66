"""HTML pages of the IoT app"""
from html import escape

_HEAD = """<!DOCTYPE html>
<html>
<head>
    <title>{title}</title>
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <style>
        body {{ font-family: sans-serif; margin: 40px; color: #222; }}
        nav a {{ margin-right: 15px; }}
        form div {{ margin-bottom: 10px; }}
        label {{ display: inline-block; width: 110px; }}
        #graph {{ width: 100%; height: 480px; }}
    </style>
</head>
<body>
    <nav><a href="/">Home</a><a href="/login">Login</a><a href="/signup">Sign up</a><a href="/profile">Profile</a></nav>
"""

_TAIL = """
</body>
</html>
"""

INDEX_PAGE = _HEAD.format(title="InfluxDB IoT App") + """
    <h1>InfluxDB IoT App</h1>
    <p>Log in with an account holding your InfluxDB read and write tokens to write
    random data points and graph them.</p>
""" + _TAIL

LOGIN_PAGE = _HEAD.format(title="Login") + """
    <h1>Login</h1>
    <form method="POST" action="/login">
        <div><label for="email">Email</label><input type="email" name="email" id="email"></div>
        <div><label for="password">Password</label><input type="password" name="password" id="password"></div>
        <button type="submit">Login</button>
    </form>
""" + _TAIL

SIGNUP_PAGE = _HEAD.format(title="Sign up") + """
    <h1>Sign up</h1>
    <form method="POST" action="/signup">
        <div><label for="email">Email</label><input type="email" name="email" id="email"></div>
        <div><label for="name">Name</label><input type="text" name="name" id="name"></div>
        <div><label for="password">Password</label><input type="password" name="password" id="password"></div>
        <div><label for="readToken">Read token</label><input type="text" name="readToken" id="readToken"></div>
        <div><label for="writeToken">Write token</label><input type="text" name="writeToken" id="writeToken"></div>
        <button type="submit">Sign up</button>
    </form>
""" + _TAIL

_PROFILE_BODY = """
    <script src="https://cdn.plot.ly/plotly-2.27.0.min.js"></script>
    <h1>Welcome, {name}!</h1>
    <button onclick="writeData()">Write data</button>
    <button onclick="queryData()">Query data</button>
    <p id="message"></p>
    <div id="graph"></div>
    <script>
        const message = document.getElementById('message');

        async function writeData() {{
            const response = await fetch('/graph_write_data');
            message.textContent = response.ok ? 'Wrote a data point' : await response.text();
        }}

        async function queryData() {{
            const response = await fetch('/graph_query_data');
            if (!response.ok) {{
                message.textContent = await response.text();
                return;
            }}
            Plotly.newPlot('graph', await response.json());
            message.textContent = '';
        }}
    </script>
"""


def profile_page(name: str) -> str:
    return _HEAD.format(title="Profile") + _PROFILE_BODY.format(name=escape(name or "")) + _TAIL
