"""评论内容渲染：只支持 **粗体** 和 *斜体*，其余文本转义。"""

import html
import re

# 粗体优先匹配，非贪婪
_TOKEN_RE = re.compile(r"(\*\*.*?\*\*|\*.*?\*)")


def render_comment(text: str) -> str:
    if not text:
        return ""
    out = []
    for part in _TOKEN_RE.split(text):
        if not part:
            continue
        if part.startswith("**") and part.endswith("**") and len(part) >= 4:
            out.append(f"<strong>{html.escape(part[2:-2])}</strong>")
        elif part.startswith("*") and part.endswith("*") and len(part) >= 2:
            out.append(f"<em>{html.escape(part[1:-1])}</em>")
        else:
            out.append(html.escape(part))
    return "".join(out).replace("\n", "<br>")
