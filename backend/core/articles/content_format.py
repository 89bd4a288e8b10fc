import math
import re
from typing import Literal, cast

from bs4 import BeautifulSoup, Tag
from markdownify import markdownify as md

from core.common.log import logger
from core.common.utils.text import truncate_text

# 富文本编辑器产出的内容中不允许出现的标签（连同内容一起删除）
TAGS_TO_DROP = [
    "script", "style", "iframe", "object", "embed", "form", "input", "meta", "base", "link",
]
# markdown 分支：需要 unwrap 的标签（只保留内容）
TAGS_TO_UNWRAP = ["span", "font"]
URL_ATTRS = frozenset(
    {"href", "src", "action", "formaction", "xlink:href", "poster", "background", "cite"}
)
SAFE_SCHEMES = frozenset({"http", "https", "mailto", "tel"})
# 浏览器解析 URL 时会忽略控制字符与空白，检查协议前先去掉
URL_IGNORED_CHARS = re.compile(r"[\x00-\x20\x7f]+")
SCHEME_RE = re.compile(r"^([a-z][a-z0-9+.\-]*):")

WORDS_PER_MINUTE = 200


def is_safe_url(value: str) -> bool:
    """相对路径、锚点以及 http/https/mailto/tel 链接"""
    url = URL_IGNORED_CHARS.sub("", value).lower()
    match = SCHEME_RE.match(url)
    return match is None or match.group(1) in SAFE_SCHEMES


def sanitize_html(content: str) -> str:
    """清理文章 HTML：删除脚本类标签、事件属性与非白名单协议的链接，保留排版与表格。"""
    if not content:
        return ""
    soup = BeautifulSoup(content, "html.parser")
    for tag in soup.find_all(TAGS_TO_DROP):
        cast(Tag, tag).decompose()
    for t in soup.find_all(True):
        tag = cast(Tag, t)
        for attr in list(tag.attrs):
            value = tag.attrs[attr]
            if attr.lower().startswith("on"):
                del tag.attrs[attr]
            elif attr.lower() in URL_ATTRS and isinstance(value, str):
                if not is_safe_url(value):
                    del tag.attrs[attr]
    return str(soup)


def html_to_text(content: str) -> str:
    if not content:
        return ""
    text = BeautifulSoup(content, "html.parser").get_text(" ")
    return re.sub(r"\s+", " ", text).strip()


def format_content(
    content: str,
    content_format: Literal["text", "markdown", "html"] = "html",
) -> str:
    """将文章 HTML 转为纯文本、Markdown 或保留 HTML。

    - text:  去掉所有标签，合并多余空行。
    - markdown: 去掉部分内联标签后用 markdownify 转成 Markdown。
    - html: 原样返回。
    """
    try:
        if content_format == "html":
            return content
        if content_format == "text":
            soup = BeautifulSoup(content, "html.parser")
            text = soup.get_text("\n").strip()
            return re.sub(r"\n\s*\n+", "\n\n", text)

        soup = BeautifulSoup(content, "html.parser")
        for tag in soup.find_all(TAGS_TO_UNWRAP):
            cast(Tag, tag).unwrap()
        for t in soup.find_all(True):
            tag = cast(Tag, t)
            tag.attrs.pop("style", None)
            tag.attrs.pop("class", None)
        content = md(str(soup), heading_style="ATX", bullets="-*+")
        return re.sub(r"\n\s*\n\s*\n+", "\n\n", content).strip()

    except Exception as e:
        logger.error(f"format_content error: {e}")
        return content


def derive_intro(content: str, max_length: int = 200) -> str:
    return truncate_text(html_to_text(content), max_length)


def read_time(content: str) -> int:
    """阅读时长（分钟），按 200 词/分钟估算，至少 1 分钟"""
    words = [w for w in html_to_text(content).split() if w]
    return max(1, math.ceil(len(words) / WORDS_PER_MINUTE))
