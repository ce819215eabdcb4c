LOGO = r"""
                 _     _       _
 _ __  _   _ ___| |__ (_) ___ | |__
| '_ \| | | / __| '_ \| |/ _ \| '_ \
| |_) | |_| \__ \ | | | | (_) | |_) |
| .__/ \__,_|___/_| |_/ |\___/|_.__/
|_|                 |__/
"""

RENDER_TYPES = ("space", "gitlab", "yaml")

DEFAULT_NAMES = {
    "space": ".space.kts",
    "gitlab": ".gitlab-ci.yml",
    "yaml": "pushjob.yml",
}
