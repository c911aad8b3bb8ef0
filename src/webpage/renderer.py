"""论坛 HTML 页面拼装，所有用户内容都经过转义"""

from html import escape
from typing import Iterable, Optional

from board.dto.thread_views import ThreadPageEntry, ThreadView
from shared.enum.attachment_kind import AttachmentKind
from shared.models.post import Post

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
    <head>
        <meta charset="utf-8">
        <title>{title}</title>
    </head>
    <body>
        <div class="container">
{body}
        </div>
    </body>
</html>
"""


def _page(title: str, body: str) -> str:
    return _PAGE_TEMPLATE.format(title=escape(title), body=body)


def render_attachment(path: Optional[str]) -> str:
    """按附件类别生成 img / video / audio 标签"""
    kind = AttachmentKind.from_path(path)
    if not path or kind is None:
        return ""
    src = escape(f"/{path}", quote=True)
    if kind is AttachmentKind.IMAGE:
        return f"<img src='{src}' class='post-image'/><br/>"
    if kind is AttachmentKind.VIDEO:
        extension = path.rsplit(".", 1)[-1]
        return (
            f"<video controls><source src='{src}' type='video/{escape(extension)}'>"
            "</video><br/>"
        )
    return f"<audio controls><source src='{src}' type='audio/mpeg'></audio><br/>"


def _render_root(post: Post) -> str:
    return (
        f"<p><b>{escape(post.display_id or '')}</b>: {escape(post.content)}</p>"
        f"{render_attachment(post.attachment)}"
    )


def render_feed(entries: Iterable[ThreadPageEntry], page: int) -> str:
    """首页：发帖表单、主题列表和翻页链接"""
    posts = "".join(
        "<div class='post'>"
        f"{_render_root(entry.root)}"
        f"<a href='/reply/{entry.root.id}' class='reply-button'>"
        f"Reply ({entry.reply_count})</a>"
        "</div>"
        for entry in entries
    )

    pagination = ""
    if page > 1:
        pagination += f'<a href="/?page={page - 1}" class="button">Previous</a>'
    # 不知道总页数，“下一页”总是显示
    pagination += f'<a href="/?page={page + 1}" class="button">Next</a>'

    body = (
        '<form action="/submit" method="post" enctype="multipart/form-data">'
        '<textarea name="content" required></textarea><br/>'
        '<input type="file" name="file"><br/>'
        '<input type="submit" value="Post" class="button">'
        "</form>"
        f'<div class="posts">{posts}</div>'
        f'<div class="pagination">{pagination}</div>'
    )
    return _page("Board", body)


def render_thread(view: ThreadView) -> str:
    """主题页：回复表单、根帖和按序号倒序的回复"""
    replies = "".join(
        "<div class='post'>"
        f"<p><b>Reply {reply.reply_sequence}</b>: {escape(reply.content)}</p>"
        "</div>"
        for reply in view.replies
    )
    body = (
        '<a href="/" class="home-button">Home</a>'
        f'<form action="/submit_reply/{view.root.id}" method="post">'
        '<textarea name="content" required></textarea><br/>'
        '<input type="submit" value="Reply" class="button">'
        "</form>"
        f'<div class="post">{_render_root(view.root)}</div>'
        f'<div class="replies">{replies}</div>'
    )
    return _page(f"Thread {view.root.display_id or view.root.id}", body)


def render_error(message: str) -> str:
    body = f'<a href="/" class="home-button">Home</a><p class="error">{escape(message)}</p>'
    return _page("Error", body)
