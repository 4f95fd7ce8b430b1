from __future__ import annotations

from html import escape

REPOSITORY_URL = "https://github.com/Malith-Rukshan/Auto-Reaction-Bot"
NAME_PLACEHOLDER = "UserName"

START_MESSAGE = (
    "👋 Hello UserName!\n\n"
    "I'm an Auto Reaction Bot. I put a random emoji reaction on every new "
    "message in the chats I'm added to.\n\n"
    "Add me to your channel or group as an admin and I'll start reacting.\n\n"
    "Type /reactions to see the enabled reactions."
)

DONATE_MESSAGE = (
    "Support the development of Auto Reaction Bot with a small donation. "
    "Every star keeps the bot running! ✨"
)

REACTIONS_HEADER = "✅ Enabled Reactions : \n\n"
THANK_YOU_MESSAGE = "Thank you for your donation! 💝"

DONATE_TITLE = "Donate to Auto Reaction Bot ✨"
DONATE_PAYLOAD = "{}"
DONATE_PROVIDER_TOKEN = ""
DONATE_START_PARAMETER = "donate"
DONATE_CURRENCY = "XTR"
DONATE_PRICES: tuple[dict[str, object], ...] = ({"label": "Pay ⭐️5", "amount": 5},)


def format_start_message(name: str | None) -> str:
    return START_MESSAGE.replace(NAME_PLACEHOLDER, name or "there", 1)


def format_reactions_message(reactions: tuple[str, ...] | list[str]) -> str:
    return REACTIONS_HEADER + ", ".join(reactions)


def start_keyboard(bot_username: str) -> list[list[dict[str, str]]]:
    return [
        [
            {"text": "➕ Add to Channel ➕", "url": f"https://t.me/{bot_username}?startchannel=botstart"},
            {"text": "➕ Add to Group ➕", "url": f"https://t.me/{bot_username}?startgroup=botstart"},
        ],
        [{"text": "Github Source 📥", "url": REPOSITORY_URL}],
        [{"text": "💝 Support Us - Donate 🤝", "url": f"https://t.me/{bot_username}?start=donate"}],
    ]


def render_landing_page(mode: str, bots: list[str]) -> str:
    bot_list = ", ".join(escape(bot_id) for bot_id in bots) or "-"
    return f"""
<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>Auto Reaction Bot</title>
  <style>
    body {{ margin:0; font-family: -apple-system, Segoe UI, sans-serif; background:#f3f5fb; color:#151820; }}
    .wrap {{ max-width: 640px; margin:0 auto; padding:24px; }}
    .card {{ background:#fff; border:1px solid #dbe0ee; border-radius:12px; padding:16px; }}
  </style>
</head>
<body>
  <div class="wrap">
    <div class="card">
      <h1>Auto Reaction Bot 🎉</h1>
      <p>The webhook server is running.</p>
      <p>Mode: {escape(mode)}</p>
      <p>Bots: {bot_list}</p>
      <p><a href="{REPOSITORY_URL}">Source code</a></p>
    </div>
  </div>
</body>
</html>
"""
