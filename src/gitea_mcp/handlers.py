"""Tool implementations.

Each handler receives the runtime, the resolved repository (None for repository-free tools)
and already-validated arguments, issues its remote call(s) through the forge client and
returns a trimmed, JSON-serializable dict. Handlers are stateless.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from .errors import SafeError, invalid_value, stale_concurrency_token
from .repo_resolver import RepositoryRef
from .safety import enforce_max_bytes

if TYPE_CHECKING:
    from .tools import Runtime

_HEX_COLOR_RE = re.compile(r"^[0-9a-fA-F]{6}$")


def _pick(obj: Any, *keys: str) -> dict[str, Any]:
    if not isinstance(obj, dict):
        return {}
    return {k: obj[k] for k in keys if obj.get(k) is not None}


def _login(obj: Any) -> str | None:
    if isinstance(obj, dict) and isinstance(obj.get("login"), str):
        return obj["login"]
    return None


def _names(items: Any, key: str = "name") -> list[str]:
    if not isinstance(items, list):
        return []
    return [it[key] for it in items if isinstance(it, dict) and isinstance(it.get(key), str)]


def _expect_dict(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise SafeError(code="Remote", message=f"Unexpected {what} response")
    return data


def _expect_list(data: Any, what: str) -> list[Any]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise SafeError(code="Remote", message=f"Unexpected {what} response")
    return data


def _path(value: str) -> str:
    return quote(value.strip("/"), safe="/")


def _seg(value: str | int) -> str:
    return quote(str(value), safe="")


def _body(arguments: dict[str, Any], *keys: str) -> dict[str, Any]:
    return {k: arguments[k] for k in keys if arguments.get(k) is not None}


async def _list(
    runtime: Runtime,
    arguments: dict[str, Any],
    *,
    path: str,
    what: str,
    params: dict[str, Any] | None = None,
    items_key: str | None = None,
) -> tuple[list[Any], dict[str, Any]]:
    """Fetch one page, or every page when ``all_pages`` is set."""
    limit = arguments.get("limit", runtime.config.limits.default_page_size)
    if arguments.get("all_pages"):
        items = await runtime.forge.paginate(path=path, params=params, per_page=limit, items_key=items_key)
        return items, {"all_pages": True, "count": len(items)}

    page = arguments.get("page", 1)
    data = await runtime.forge.request_json(
        method="GET",
        path=path,
        params={**(params or {}), "page": page, "limit": limit},
    )
    if items_key is not None and isinstance(data, dict):
        data = data.get(items_key)
    items = _expect_list(data, what)
    return items, {"page": page, "limit": limit, "count": len(items)}


# Summaries


def _issue_summary(it: dict[str, Any]) -> dict[str, Any]:
    out = _pick(it, "number", "title", "state", "comments", "created_at", "updated_at", "html_url")
    out["user"] = _login(it.get("user"))
    out["labels"] = _names(it.get("labels"))
    out["assignees"] = _names(it.get("assignees"), "login")
    milestone = it.get("milestone")
    if isinstance(milestone, dict):
        out["milestone"] = _pick(milestone, "id", "title")
    return out


def _pr_summary(pr: dict[str, Any]) -> dict[str, Any]:
    out = _pick(pr, "number", "title", "state", "draft", "merged", "mergeable", "created_at", "updated_at", "html_url")
    out["user"] = _login(pr.get("user"))
    out["labels"] = _names(pr.get("labels"))
    head, base = pr.get("head"), pr.get("base")
    if isinstance(head, dict):
        out["head"] = _pick(head, "ref", "sha")
    if isinstance(base, dict):
        out["base"] = _pick(base, "ref", "sha")
    return out


def _comment_summary(c: dict[str, Any]) -> dict[str, Any]:
    out = _pick(c, "id", "body", "created_at", "updated_at", "html_url")
    out["user"] = _login(c.get("user"))
    return out


def _review_summary(r: dict[str, Any]) -> dict[str, Any]:
    out = _pick(r, "id", "state", "body", "commit_id", "submitted_at", "html_url")
    out["user"] = _login(r.get("user"))
    return out


def _entry_summary(e: dict[str, Any]) -> dict[str, Any]:
    return _pick(e, "name", "path", "type", "size", "sha")


def _branch_summary(b: dict[str, Any]) -> dict[str, Any]:
    out = _pick(b, "name", "protected")
    commit = b.get("commit")
    if isinstance(commit, dict):
        out["commit"] = _pick(commit, "id", "message", "timestamp")
    return out


def _protection_summary(p: dict[str, Any]) -> dict[str, Any]:
    return _pick(
        p,
        "branch_name",
        "rule_name",
        "enable_push",
        "required_approvals",
        "block_on_rejected_reviews",
        "created_at",
    )


def _commit_summary(c: dict[str, Any]) -> dict[str, Any]:
    out = _pick(c, "sha", "html_url", "created")
    inner = c.get("commit")
    if isinstance(inner, dict):
        if isinstance(inner.get("message"), str):
            out["message"] = inner["message"]
        author = inner.get("author")
        if isinstance(author, dict):
            out["author"] = _pick(author, "name", "email", "date")
    return out


def _label_summary(lbl: dict[str, Any]) -> dict[str, Any]:
    return _pick(lbl, "id", "name", "color", "description", "exclusive")


def _milestone_summary(m: dict[str, Any]) -> dict[str, Any]:
    return _pick(m, "id", "title", "description", "state", "open_issues", "closed_issues", "due_on")


def _notification_summary(n: dict[str, Any]) -> dict[str, Any]:
    out = _pick(n, "id", "unread", "pinned", "updated_at")
    subject = n.get("subject")
    if isinstance(subject, dict):
        out["subject"] = _pick(subject, "title", "type", "state", "html_url")
    repo = n.get("repository")
    if isinstance(repo, dict) and isinstance(repo.get("full_name"), str):
        out["repository"] = repo["full_name"]
    return out


def _release_summary(r: dict[str, Any]) -> dict[str, Any]:
    out = _pick(r, "id", "tag_name", "name", "draft", "prerelease", "created_at", "published_at", "html_url")
    out["author"] = _login(r.get("author"))
    return out


def _repo_summary(r: dict[str, Any]) -> dict[str, Any]:
    return _pick(
        r,
        "id",
        "full_name",
        "description",
        "private",
        "archived",
        "fork",
        "default_branch",
        "stars_count",
        "forks_count",
        "open_issues_count",
        "open_pr_counter",
        "html_url",
        "clone_url",
        "ssh_url",
        "updated_at",
    )


def _user_summary(u: dict[str, Any]) -> dict[str, Any]:
    return _pick(u, "id", "login", "full_name", "email", "is_admin", "created", "html_url")


def _tag_summary(t: dict[str, Any]) -> dict[str, Any]:
    out = _pick(t, "name", "id", "message")
    commit = t.get("commit")
    if isinstance(commit, dict) and isinstance(commit.get("sha"), str):
        out["commit_sha"] = commit["sha"]
    return out


def _org_summary(o: dict[str, Any]) -> dict[str, Any]:
    out = _pick(o, "id", "full_name", "description", "visibility", "website", "location")
    name = o.get("username") or o.get("name")
    if isinstance(name, str):
        out["name"] = name
    return out


def _team_summary(t: dict[str, Any]) -> dict[str, Any]:
    return _pick(t, "id", "name", "description", "permission", "includes_all_repositories")


def _run_summary(r: dict[str, Any]) -> dict[str, Any]:
    return _pick(
        r,
        "id",
        "name",
        "display_title",
        "title",
        "status",
        "conclusion",
        "event",
        "head_branch",
        "head_sha",
        "run_number",
        "workflow_id",
        "created_at",
        "updated_at",
        "html_url",
        "url",
    )


def _decode_text(content_b64: str, *, what: str, max_bytes: int) -> str:
    try:
        decoded = base64.b64decode(content_b64.encode("utf-8"), validate=False)
    except (binascii.Error, ValueError) as exc:
        raise SafeError(code="Remote", message=f"Unexpected {what} content encoding") from exc
    enforce_max_bytes(data=decoded, max_bytes=max_bytes, what=what)
    try:
        return decoded.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise SafeError(code="UserInput", message="Binary file content is not supported") from exc


def _encode_text(text: str, *, max_bytes: int) -> str:
    raw = text.encode("utf-8")
    enforce_max_bytes(data=raw, max_bytes=max_bytes, what="file content")
    return base64.b64encode(raw).decode("ascii")


# Issues


async def issue_list(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    params = {
        "state": arguments.get("state", "open"),
        "type": "issues",
        "labels": arguments.get("labels"),
        "milestones": arguments.get("milestone"),
    }
    items, meta = await _list(runtime, arguments, path=f"{repo.api_path}/issues", what="issues", params=params)
    return {"issues": [_issue_summary(it) for it in items if isinstance(it, dict)], **meta}


async def issue_get(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    data = _expect_dict(
        await runtime.forge.request_json(method="GET", path=f"{repo.api_path}/issues/{arguments['index']}"),
        "issue",
    )
    issue = _issue_summary(data)
    issue["body"] = data.get("body") or ""
    return {"issue": issue}


async def issue_create(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    payload = _body(arguments, "title", "body", "labels", "milestone", "assignees")
    data = _expect_dict(
        await runtime.forge.request_json(method="POST", path=f"{repo.api_path}/issues", json_body=payload),
        "issue",
    )
    return {"issue": _issue_summary(data)}


async def issue_edit(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    payload = _body(arguments, "title", "body", "state", "labels", "milestone", "assignees")
    if not payload:
        raise SafeError(code="UserInput", message="Nothing to change", hint="Provide at least one field to edit")
    data = await runtime.forge.request_json(
        method="PATCH", path=f"{repo.api_path}/issues/{arguments['index']}", json_body=payload
    )
    return {"issue": _issue_summary(_expect_dict(data, "issue"))}


async def issue_comment_list(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await runtime.forge.request_json(method="GET", path=f"{repo.api_path}/issues/{arguments['index']}/comments")
    comments = _expect_list(data, "comments")
    return {"comments": [_comment_summary(c) for c in comments if isinstance(c, dict)], "count": len(comments)}


async def issue_comment_create(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await runtime.forge.request_json(
        method="POST",
        path=f"{repo.api_path}/issues/{arguments['index']}/comments",
        json_body={"body": arguments["body"]},
    )
    return {"comment": _comment_summary(_expect_dict(data, "comment"))}


# Pull requests


async def pr_list(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    items, meta = await _list(
        runtime,
        arguments,
        path=f"{repo.api_path}/pulls",
        what="pull requests",
        params={"state": arguments.get("state", "open")},
    )
    return {"pull_requests": [_pr_summary(pr) for pr in items if isinstance(pr, dict)], **meta}


async def pr_get(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    data = _expect_dict(
        await runtime.forge.request_json(method="GET", path=f"{repo.api_path}/pulls/{arguments['index']}"),
        "pull request",
    )
    pr = _pr_summary(data)
    pr.update(_pick(data, "merged_at", "merge_commit_sha", "comments", "additions", "deletions", "changed_files"))
    pr["body"] = data.get("body") or ""
    return {"pull_request": pr}


async def pr_create(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    payload = _body(arguments, "title", "head", "base", "body", "labels", "milestone", "assignees")
    data = await runtime.forge.request_json(method="POST", path=f"{repo.api_path}/pulls", json_body=payload)
    return {"pull_request": _pr_summary(_expect_dict(data, "pull request"))}


async def pr_edit(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    payload = _body(arguments, "title", "body", "state", "labels", "assignees")
    if not payload:
        raise SafeError(code="UserInput", message="Nothing to change", hint="Provide at least one field to edit")
    data = await runtime.forge.request_json(
        method="PATCH", path=f"{repo.api_path}/pulls/{arguments['index']}", json_body=payload
    )
    return {"pull_request": _pr_summary(_expect_dict(data, "pull request"))}


async def pr_merge(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    index = arguments["index"]
    style = arguments.get("merge_style", "merge")
    payload: dict[str, Any] = {"Do": style}
    if arguments.get("merge_message"):
        payload["merge_message_field"] = arguments["merge_message"]
    if arguments.get("delete_branch_after_merge"):
        payload["delete_branch_after_merge"] = True

    await runtime.forge.request_no_content(method="POST", path=f"{repo.api_path}/pulls/{index}/merge", json_body=payload)
    return {"merged": {"index": index, "merge_style": style}}


async def pr_review_list(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await runtime.forge.request_json(method="GET", path=f"{repo.api_path}/pulls/{arguments['index']}/reviews")
    reviews = _expect_list(data, "reviews")
    return {"reviews": [_review_summary(r) for r in reviews if isinstance(r, dict)], "count": len(reviews)}


async def pr_review_create(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    payload = _body(arguments, "event", "body")
    data = await runtime.forge.request_json(
        method="POST", path=f"{repo.api_path}/pulls/{arguments['index']}/reviews", json_body=payload
    )
    return {"review": _review_summary(_expect_dict(data, "review"))}


async def pr_files(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await runtime.forge.request_json(method="GET", path=f"{repo.api_path}/pulls/{arguments['index']}/files")
    files = _expect_list(data, "pull request files")
    return {
        "files": [
            _pick(f, "filename", "status", "additions", "deletions", "changes", "previous_filename")
            for f in files
            if isinstance(f, dict)
        ],
        "count": len(files),
    }


async def pr_diff(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    text = await runtime.forge.request_text(path=f"{repo.api_path}/pulls/{arguments['index']}.diff")
    return {"diff": text}


# Files


async def file_read(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    path = arguments["path"]
    ref = arguments.get("ref") or None
    data = await runtime.forge.request_json(
        method="GET",
        path=f"{repo.api_path}/contents/{_path(path)}",
        params={"ref": ref},
    )
    if isinstance(data, list):
        raise SafeError(code="UserInput", message="Path is a directory", hint="Use file_list for directories")
    data = _expect_dict(data, "file")
    if data.get("type") != "file":
        raise SafeError(code="UserInput", message="Path is not a file")

    content_b64 = data.get("content")
    if data.get("encoding") != "base64" or not isinstance(content_b64, str):
        raise SafeError(code="Remote", message="Unexpected file content encoding")
    text = _decode_text(content_b64, what="file", max_bytes=runtime.config.limits.file_max_bytes)

    file_obj: dict[str, Any] = {
        "path": data.get("path", path),
        "sha": data.get("sha"),
        "size": data.get("size"),
        "content": text,
        "encoding": "utf-8",
    }
    if ref:
        file_obj["ref"] = ref
    return {"file": file_obj}


async def file_list(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    sub = _path(arguments.get("path") or "")
    path = f"{repo.api_path}/contents/{sub}" if sub else f"{repo.api_path}/contents"
    data = await runtime.forge.request_json(method="GET", path=path, params={"ref": arguments.get("ref") or None})
    if isinstance(data, dict):
        data = [data]
    entries = _expect_list(data, "directory listing")
    return {"entries": [_entry_summary(e) for e in entries if isinstance(e, dict)], "count": len(entries)}


def _file_write_result(path: str, data: Any) -> dict[str, Any]:
    data = _expect_dict(data, "file")
    content = data.get("content")
    commit = data.get("commit")
    out: dict[str, Any] = {"file": {"path": path}}
    if isinstance(content, dict):
        out["file"] = {"path": content.get("path", path), "sha": content.get("sha")}
    if isinstance(commit, dict):
        out["commit"] = _pick(commit, "sha", "html_url", "message")
    return out


def _is_stale_sha(err: SafeError) -> bool:
    if err.code == "Conflict":
        return True
    return err.code == "Remote" and err.status_code == 422 and "sha" in (err.hint or "").lower()


async def file_create(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    path = arguments["path"]
    payload = _body(arguments, "message", "branch", "new_branch")
    payload["content"] = _encode_text(arguments["content"], max_bytes=runtime.config.limits.file_max_bytes)
    data = await runtime.forge.request_json(
        method="POST", path=f"{repo.api_path}/contents/{_path(path)}", json_body=payload
    )
    return _file_write_result(path, data)


async def file_update(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    path = arguments["path"]
    payload = _body(arguments, "sha", "message", "branch", "new_branch")
    payload["content"] = _encode_text(arguments["content"], max_bytes=runtime.config.limits.file_max_bytes)
    try:
        data = await runtime.forge.request_json(
            method="PUT", path=f"{repo.api_path}/contents/{_path(path)}", json_body=payload
        )
    except SafeError as err:
        if _is_stale_sha(err):
            raise stale_concurrency_token(path, err.status_code) from err
        raise
    return _file_write_result(path, data)


async def file_delete(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    path = arguments["path"]
    payload = _body(arguments, "sha", "message", "branch")
    try:
        data = await runtime.forge.request_json(
            method="DELETE", path=f"{repo.api_path}/contents/{_path(path)}", json_body=payload
        )
    except SafeError as err:
        if _is_stale_sha(err):
            raise stale_concurrency_token(path, err.status_code) from err
        raise
    out: dict[str, Any] = {"deleted": {"path": path}}
    if isinstance(data, dict) and isinstance(data.get("commit"), dict):
        out["commit"] = _pick(data["commit"], "sha", "html_url", "message")
    return out


async def tree_get(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    ref = arguments.get("ref") or "HEAD"
    data = _expect_dict(
        await runtime.forge.request_json(
            method="GET",
            path=f"{repo.api_path}/git/trees/{_seg(ref)}",
            params={"recursive": arguments.get("recursive", True)},
        ),
        "tree",
    )
    entries = _expect_list(data.get("tree"), "tree")
    return {
        "tree": {
            "sha": data.get("sha"),
            "truncated": bool(data.get("truncated")),
            "entries": [_pick(e, "path", "type", "size", "sha") for e in entries if isinstance(e, dict)],
        }
    }


# Branches


async def branch_list(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    items, meta = await _list(runtime, arguments, path=f"{repo.api_path}/branches", what="branches")
    return {"branches": [_branch_summary(b) for b in items if isinstance(b, dict)], **meta}


async def branch_create(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    payload = _body(arguments, "new_branch_name", "old_branch_name")
    data = await runtime.forge.request_json(method="POST", path=f"{repo.api_path}/branches", json_body=payload)
    return {"branch": _branch_summary(_expect_dict(data, "branch"))}


async def branch_delete(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    branch = arguments["branch"]
    await runtime.forge.request_no_content(method="DELETE", path=f"{repo.api_path}/branches/{_path(branch)}")
    return {"deleted": {"branch": branch}}


async def branch_protection_list(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await runtime.forge.request_json(method="GET", path=f"{repo.api_path}/branch_protections")
    rules = _expect_list(data, "branch protections")
    return {"protections": [_protection_summary(p) for p in rules if isinstance(p, dict)], "count": len(rules)}


async def branch_protection_create(
    runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]
) -> dict[str, Any]:
    payload = _body(arguments, "branch_name", "enable_push", "block_on_rejected_reviews")
    payload["rule_name"] = arguments["branch_name"]
    data = await runtime.forge.request_json(
        method="POST", path=f"{repo.api_path}/branch_protections", json_body=payload
    )
    return {"protection": _protection_summary(_expect_dict(data, "branch protection"))}


# Commits


async def commit_list(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    params = {"sha": arguments.get("sha") or None, "path": arguments.get("path") or None}
    items, meta = await _list(runtime, arguments, path=f"{repo.api_path}/commits", what="commits", params=params)
    return {"commits": [_commit_summary(c) for c in items if isinstance(c, dict)], **meta}


async def commit_get(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    data = _expect_dict(
        await runtime.forge.request_json(method="GET", path=f"{repo.api_path}/git/commits/{_seg(arguments['sha'])}"),
        "commit",
    )
    commit = _commit_summary(data)
    stats = data.get("stats")
    if isinstance(stats, dict):
        commit["stats"] = _pick(stats, "total", "additions", "deletions")
    files = data.get("files")
    if isinstance(files, list):
        commit["files"] = [_pick(f, "filename", "status") for f in files if isinstance(f, dict)]
    parents = data.get("parents")
    if isinstance(parents, list):
        commit["parents"] = [p["sha"] for p in parents if isinstance(p, dict) and isinstance(p.get("sha"), str)]
    return {"commit": commit}


async def commit_diff(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    text = await runtime.forge.request_text(path=f"{repo.api_path}/git/commits/{_seg(arguments['sha'])}.diff")
    return {"diff": text}


async def commit_compare(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    base, head = arguments["base"], arguments["head"]
    data = _expect_dict(
        await runtime.forge.request_json(
            method="GET", path=f"{repo.api_path}/compare/{_path(base)}...{_path(head)}"
        ),
        "compare",
    )
    commits = _expect_list(data.get("commits"), "compare")
    out: dict[str, Any] = {
        "base": base,
        "head": head,
        "total_commits": data.get("total_commits", len(commits)),
        "commits": [_commit_summary(c) for c in commits if isinstance(c, dict)],
    }
    files = data.get("files")
    if isinstance(files, list):
        out["files"] = [_pick(f, "filename", "status") for f in files if isinstance(f, dict)]
    return {"comparison": out}


# Labels


def _normalize_color(color: str) -> str:
    bare = color.strip().lstrip("#")
    if not _HEX_COLOR_RE.match(bare):
        raise invalid_value("color", detail="must be a 6-digit hex color such as 'ff0000'")
    return f"#{bare.lower()}"


async def label_list(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    items, meta = await _list(runtime, arguments, path=f"{repo.api_path}/labels", what="labels")
    return {"labels": [_label_summary(lbl) for lbl in items if isinstance(lbl, dict)], **meta}


async def label_create(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    payload = _body(arguments, "name", "description")
    payload["color"] = _normalize_color(arguments["color"])
    data = await runtime.forge.request_json(method="POST", path=f"{repo.api_path}/labels", json_body=payload)
    return {"label": _label_summary(_expect_dict(data, "label"))}


async def label_edit(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    payload = _body(arguments, "name", "description")
    if arguments.get("color") is not None:
        payload["color"] = _normalize_color(arguments["color"])
    if not payload:
        raise SafeError(code="UserInput", message="Nothing to change", hint="Provide name, color or description")
    data = await runtime.forge.request_json(
        method="PATCH", path=f"{repo.api_path}/labels/{arguments['id']}", json_body=payload
    )
    return {"label": _label_summary(_expect_dict(data, "label"))}


# Milestones


async def milestone_list(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    items, meta = await _list(
        runtime,
        arguments,
        path=f"{repo.api_path}/milestones",
        what="milestones",
        params={"state": arguments.get("state", "open")},
    )
    return {"milestones": [_milestone_summary(m) for m in items if isinstance(m, dict)], **meta}


async def milestone_get(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await runtime.forge.request_json(method="GET", path=f"{repo.api_path}/milestones/{arguments['id']}")
    return {"milestone": _milestone_summary(_expect_dict(data, "milestone"))}


async def milestone_create(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    payload = _body(arguments, "title", "description", "due_on")
    data = await runtime.forge.request_json(method="POST", path=f"{repo.api_path}/milestones", json_body=payload)
    return {"milestone": _milestone_summary(_expect_dict(data, "milestone"))}


# Notifications


async def notification_list(runtime: Runtime, repo: RepositoryRef | None, arguments: dict[str, Any]) -> dict[str, Any]:
    status = arguments.get("status", "unread")
    status_types = ["unread", "read", "pinned"] if status == "all" else [status]
    items, meta = await _list(
        runtime,
        arguments,
        path="/notifications",
        what="notifications",
        params={"status-types": status_types},
    )
    return {"notifications": [_notification_summary(n) for n in items if isinstance(n, dict)], **meta}


async def notification_mark_read(
    runtime: Runtime, repo: RepositoryRef | None, arguments: dict[str, Any]
) -> dict[str, Any]:
    thread_id = arguments.get("id")
    if thread_id is not None:
        await runtime.forge.request_no_content(method="PATCH", path=f"/notifications/threads/{thread_id}")
        return {"marked_read": {"id": thread_id}}
    await runtime.forge.request_no_content(method="PUT", path="/notifications")
    return {"marked_read": {"all": True}}


# Releases


async def release_list(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    items, meta = await _list(runtime, arguments, path=f"{repo.api_path}/releases", what="releases")
    return {"releases": [_release_summary(r) for r in items if isinstance(r, dict)], **meta}


async def release_get(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    data = _expect_dict(
        await runtime.forge.request_json(method="GET", path=f"{repo.api_path}/releases/{arguments['id']}"),
        "release",
    )
    release = _release_summary(data)
    release["body"] = data.get("body") or ""
    release["assets"] = [
        _pick(a, "id", "name", "size", "download_count", "browser_download_url")
        for a in data.get("assets") or []
        if isinstance(a, dict)
    ]
    return {"release": release}


async def release_create(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    payload = _body(arguments, "tag_name", "name", "body", "draft", "prerelease", "target_commitish")
    data = await runtime.forge.request_json(method="POST", path=f"{repo.api_path}/releases", json_body=payload)
    return {"release": _release_summary(_expect_dict(data, "release"))}


# Repository


async def repo_get(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await runtime.forge.request_json(method="GET", path=repo.api_path)
    return {"repository": _repo_summary(_expect_dict(data, "repository"))}


async def repo_search(runtime: Runtime, repo: RepositoryRef | None, arguments: dict[str, Any]) -> dict[str, Any]:
    items, meta = await _list(
        runtime,
        arguments,
        path="/repos/search",
        what="repository search",
        params={"q": arguments["q"]},
        items_key="data",
    )
    return {"repositories": [_repo_summary(r) for r in items if isinstance(r, dict)], **meta}


# Users


async def user_get_me(runtime: Runtime, repo: RepositoryRef | None, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await runtime.forge.request_json(method="GET", path="/user")
    return {"user": _user_summary(_expect_dict(data, "user"))}


async def user_get(runtime: Runtime, repo: RepositoryRef | None, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await runtime.forge.request_json(method="GET", path=f"/users/{_seg(arguments['username'])}")
    return {"user": _user_summary(_expect_dict(data, "user"))}


# Tags


async def tag_list(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    items, meta = await _list(runtime, arguments, path=f"{repo.api_path}/tags", what="tags")
    return {"tags": [_tag_summary(t) for t in items if isinstance(t, dict)], **meta}


async def tag_create(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    payload = _body(arguments, "tag_name", "target", "message")
    data = await runtime.forge.request_json(method="POST", path=f"{repo.api_path}/tags", json_body=payload)
    return {"tag": _tag_summary(_expect_dict(data, "tag"))}


# Wiki


async def wiki_list(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    try:
        data = await runtime.forge.request_json(method="GET", path=f"{repo.api_path}/wiki/pages")
    except SafeError as err:
        if err.code != "NotFound":
            raise
        return {"wiki_enabled": False, "pages": [], "count": 0}
    pages = _expect_list(data, "wiki pages")
    return {
        "wiki_enabled": True,
        "pages": [_pick(p, "title", "sub_url", "html_url") for p in pages if isinstance(p, dict)],
        "count": len(pages),
    }


async def wiki_get(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    data = _expect_dict(
        await runtime.forge.request_json(method="GET", path=f"{repo.api_path}/wiki/page/{_seg(arguments['slug'])}"),
        "wiki page",
    )
    content_b64 = data.get("content_base64")
    content = ""
    if isinstance(content_b64, str) and content_b64:
        content = _decode_text(content_b64, what="wiki page", max_bytes=runtime.config.limits.file_max_bytes)
    page = _pick(data, "title", "sub_url", "html_url")
    page["content"] = content
    return {"page": page}


async def wiki_create(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    payload = {
        "title": arguments["title"],
        "content_base64": _encode_text(arguments["content"], max_bytes=runtime.config.limits.file_max_bytes),
    }
    data = await runtime.forge.request_json(method="POST", path=f"{repo.api_path}/wiki/new", json_body=payload)
    return {"page": _pick(_expect_dict(data, "wiki page"), "title", "sub_url", "html_url")}


# Organizations


async def org_list(runtime: Runtime, repo: RepositoryRef | None, arguments: dict[str, Any]) -> dict[str, Any]:
    orgs = _expect_list(await runtime.forge.request_json(method="GET", path="/user/orgs"), "organizations")
    return {"organizations": [_org_summary(o) for o in orgs if isinstance(o, dict)], "count": len(orgs)}


async def org_get(runtime: Runtime, repo: RepositoryRef | None, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await runtime.forge.request_json(method="GET", path=f"/orgs/{_seg(arguments['org'])}")
    return {"organization": _org_summary(_expect_dict(data, "organization"))}


async def org_teams(runtime: Runtime, repo: RepositoryRef | None, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await runtime.forge.request_json(method="GET", path=f"/orgs/{_seg(arguments['org'])}/teams")
    teams = _expect_list(data, "teams")
    return {"teams": [_team_summary(t) for t in teams if isinstance(t, dict)], "count": len(teams)}


# Actions


async def _workflow_files(runtime: Runtime, repo: RepositoryRef, directory: str) -> list[dict[str, Any]]:
    try:
        data = await runtime.forge.request_json(method="GET", path=f"{repo.api_path}/contents/{directory}")
    except SafeError as err:
        if err.code == "NotFound":
            return []
        raise
    if not isinstance(data, list):
        return []
    return [_entry_summary(e) for e in data if isinstance(e, dict)]


async def actions_workflow_list(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    tasks: list[Any] = []
    try:
        data = await runtime.forge.request_json(method="GET", path=f"{repo.api_path}/actions/tasks")
        if isinstance(data, dict):
            tasks = _expect_list(data.get("workflow_runs"), "action tasks")
    except SafeError as err:
        if err.code != "NotFound":
            raise

    if tasks:
        return {"source": "tasks", "workflows": [_run_summary(t) for t in tasks if isinstance(t, dict)]}

    for directory in (".gitea/workflows", ".github/workflows"):
        files = await _workflow_files(runtime, repo, directory)
        if files:
            return {"source": directory, "workflows": files}

    return {"source": None, "workflows": []}


async def actions_run_list(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    items, meta = await _list(
        runtime,
        arguments,
        path=f"{repo.api_path}/actions/runs",
        what="workflow runs",
        items_key="workflow_runs",
    )
    return {"runs": [_run_summary(r) for r in items if isinstance(r, dict)], **meta}


async def actions_run_get(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await runtime.forge.request_json(method="GET", path=f"{repo.api_path}/actions/runs/{arguments['run_id']}")
    return {"run": _run_summary(_expect_dict(data, "workflow run"))}


async def actions_job_logs(runtime: Runtime, repo: RepositoryRef, arguments: dict[str, Any]) -> dict[str, Any]:
    text = await runtime.forge.request_text(path=f"{repo.api_path}/actions/jobs/{arguments['job_id']}/logs")
    return {"job_id": arguments["job_id"], "logs": text}
