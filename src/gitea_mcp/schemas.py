"""Declarative tool metadata (public contract surface).

Every tool is described by a human description and a JSON input schema. The schemas are
consumed twice: advertised to MCP clients by ``list_tools`` and enforced at dispatch time by
``validation.validate_arguments``.
"""

from __future__ import annotations

from typing import Any

_REPO_PROPS: dict[str, Any] = {
    "owner": {"type": "string", "description": "Repository owner. Optional if directory is given."},
    "repo": {"type": "string", "description": "Repository name. Optional if directory is given."},
    "directory": {
        "type": "string",
        "description": "Local checkout whose git remote identifies the repository.",
    },
}

_PAGE_PROPS: dict[str, Any] = {
    "page": {"type": "integer", "minimum": 1, "default": 1, "description": "Page number (1-based)."},
    "limit": {"type": "integer", "minimum": 1, "maximum": 50, "default": 20, "description": "Items per page."},
    "all_pages": {
        "type": "boolean",
        "default": False,
        "description": "Fetch every page and return the concatenated list (ignores page).",
    },
}

_STATE_FILTER = {"type": "string", "enum": ["open", "closed", "all"], "default": "open"}
_STATE_EDIT = {"type": "string", "enum": ["open", "closed"]}
_INDEX = {"type": "integer", "minimum": 1}
_ID = {"type": "integer", "minimum": 1}
_NAME = {"type": "string", "minLength": 1}
_TEXT = {"type": "string"}
_FLAG = {"type": "boolean"}
_INT_LIST = {"type": "array", "items": {"type": "integer"}}
_STR_LIST = {"type": "array", "items": {"type": "string"}}


def _schema(
    properties: dict[str, Any],
    required: list[str] | None = None,
    *,
    repo: bool = True,
    paged: bool = False,
) -> dict[str, Any]:
    props: dict[str, Any] = {}
    if repo:
        props.update(_REPO_PROPS)
    props.update(properties)
    if paged:
        props.update(_PAGE_PROPS)
    return {
        "type": "object",
        "required": list(required or []),
        "properties": props,
        "additionalProperties": False,
    }


def _tool(description: str, schema: dict[str, Any]) -> dict[str, Any]:
    return {"description": description, "inputSchema": schema}


TOOL_METADATA: dict[str, dict[str, Any]] = {
    # Issues
    "issue_list": _tool(
        "List issues in a repository, optionally filtered by state, labels or milestone.",
        _schema(
            {
                "state": _STATE_FILTER,
                "labels": {"type": "string", "description": "Comma-separated label names."},
                "milestone": {"type": "string", "description": "Milestone name."},
            },
            paged=True,
        ),
    ),
    "issue_get": _tool("Get a single issue by number.", _schema({"index": _INDEX}, ["index"])),
    "issue_create": _tool(
        "Create an issue. Labels and milestone are IDs (see label_list, milestone_list).",
        _schema(
            {
                "title": _NAME,
                "body": _TEXT,
                "labels": _INT_LIST,
                "milestone": _ID,
                "assignees": _STR_LIST,
            },
            ["title"],
        ),
    ),
    "issue_edit": _tool(
        "Edit an issue. Only the given fields change; labels and assignees replace existing values.",
        _schema(
            {
                "index": _INDEX,
                "title": _NAME,
                "body": _TEXT,
                "state": _STATE_EDIT,
                "labels": _INT_LIST,
                "milestone": _ID,
                "assignees": _STR_LIST,
            },
            ["index"],
        ),
    ),
    # Issue comments
    "issue_comment_list": _tool("List comments on an issue or pull request.", _schema({"index": _INDEX}, ["index"])),
    "issue_comment_create": _tool(
        "Comment on an issue or pull request.",
        _schema({"index": _INDEX, "body": _NAME}, ["index", "body"]),
    ),
    # Pull requests
    "pr_list": _tool("List pull requests in a repository.", _schema({"state": _STATE_FILTER}, paged=True)),
    "pr_get": _tool("Get a single pull request by number.", _schema({"index": _INDEX}, ["index"])),
    "pr_create": _tool(
        "Open a pull request from head into base.",
        _schema(
            {
                "title": _NAME,
                "head": _NAME,
                "base": _NAME,
                "body": _TEXT,
                "labels": _INT_LIST,
                "milestone": _ID,
                "assignees": _STR_LIST,
            },
            ["title", "head", "base"],
        ),
    ),
    "pr_edit": _tool(
        "Edit a pull request. Only the given fields change.",
        _schema(
            {
                "index": _INDEX,
                "title": _NAME,
                "body": _TEXT,
                "state": _STATE_EDIT,
                "labels": _INT_LIST,
                "assignees": _STR_LIST,
            },
            ["index"],
        ),
    ),
    "pr_merge": _tool(
        "Merge a pull request.",
        _schema(
            {
                "index": _INDEX,
                "merge_style": {
                    "type": "string",
                    "enum": ["merge", "rebase", "rebase-merge", "squash", "fast-forward-only", "manually-merged"],
                    "default": "merge",
                },
                "merge_message": _TEXT,
                "delete_branch_after_merge": {"type": "boolean", "default": False},
            },
            ["index"],
        ),
    ),
    # Reviews
    "pr_review_list": _tool("List reviews on a pull request.", _schema({"index": _INDEX}, ["index"])),
    "pr_review_create": _tool(
        "Submit a review on a pull request.",
        _schema(
            {
                "index": _INDEX,
                "event": {"type": "string", "enum": ["APPROVED", "REQUEST_CHANGES", "COMMENT"]},
                "body": _TEXT,
            },
            ["index", "event"],
        ),
    ),
    # PR files
    "pr_files": _tool("List files changed by a pull request.", _schema({"index": _INDEX}, ["index"])),
    "pr_diff": _tool("Get the unified diff of a pull request.", _schema({"index": _INDEX}, ["index"])),
    # Files
    "file_read": _tool(
        "Read a file's text content. The returned sha is required by file_update and file_delete.",
        _schema({"path": _NAME, "ref": _TEXT}, ["path"]),
    ),
    "file_list": _tool(
        "List the entries of a directory in the repository (root when path is empty).",
        _schema({"path": {"type": "string", "default": ""}, "ref": _TEXT}),
    ),
    "file_create": _tool(
        "Create a new file with a commit.",
        _schema(
            {
                "path": _NAME,
                "content": _TEXT,
                "message": _NAME,
                "branch": _TEXT,
                "new_branch": _TEXT,
            },
            ["path", "content", "message"],
        ),
    ),
    "file_update": _tool(
        "Replace a file's content with a commit. Requires the sha from file_read; a stale sha is rejected.",
        _schema(
            {
                "path": _NAME,
                "content": _TEXT,
                "sha": _NAME,
                "message": _NAME,
                "branch": _TEXT,
                "new_branch": _TEXT,
            },
            ["path", "content", "sha", "message"],
        ),
    ),
    "file_delete": _tool(
        "Delete a file with a commit. Requires the sha from file_read; a stale sha is rejected.",
        _schema(
            {"path": _NAME, "sha": _NAME, "message": _NAME, "branch": _TEXT},
            ["path", "sha", "message"],
        ),
    ),
    "tree_get": _tool(
        "Get the git tree of a ref (recursive by default).",
        _schema({"ref": _TEXT, "recursive": {"type": "boolean", "default": True}}),
    ),
    # Branches
    "branch_list": _tool("List branches in a repository.", _schema({}, paged=True)),
    "branch_create": _tool(
        "Create a branch from an existing branch or commit (default branch when omitted).",
        _schema({"new_branch_name": _NAME, "old_branch_name": _TEXT}, ["new_branch_name"]),
    ),
    "branch_delete": _tool("Delete a branch.", _schema({"branch": _NAME}, ["branch"])),
    "branch_protection_list": _tool("List branch protection rules.", _schema({})),
    "branch_protection_create": _tool(
        "Create a branch protection rule for a branch name or pattern.",
        _schema(
            {"branch_name": _NAME, "enable_push": _FLAG, "block_on_rejected_reviews": _FLAG},
            ["branch_name"],
        ),
    ),
    # Commits
    "commit_list": _tool(
        "List commits, optionally from a ref and restricted to a path.",
        _schema({"sha": _TEXT, "path": _TEXT}, paged=True),
    ),
    "commit_get": _tool("Get a single commit.", _schema({"sha": _NAME}, ["sha"])),
    "commit_diff": _tool("Get the unified diff of a commit.", _schema({"sha": _NAME}, ["sha"])),
    "commit_compare": _tool(
        "Compare two refs (base...head).",
        _schema({"base": _NAME, "head": _NAME}, ["base", "head"]),
    ),
    # Labels
    "label_list": _tool("List labels defined in a repository.", _schema({}, paged=True)),
    "label_create": _tool(
        "Create a label. Color accepts 'ff0000' or '#ff0000'.",
        _schema({"name": _NAME, "color": _NAME, "description": _TEXT}, ["name", "color"]),
    ),
    "label_edit": _tool(
        "Edit a label by ID.",
        _schema({"id": _ID, "name": _NAME, "color": _NAME, "description": _TEXT}, ["id"]),
    ),
    # Milestones
    "milestone_list": _tool("List milestones.", _schema({"state": _STATE_FILTER}, paged=True)),
    "milestone_get": _tool("Get a milestone by ID.", _schema({"id": _ID}, ["id"])),
    "milestone_create": _tool(
        "Create a milestone. due_on is an ISO 8601 timestamp.",
        _schema({"title": _NAME, "description": _TEXT, "due_on": _TEXT}, ["title"]),
    ),
    # Notifications
    "notification_list": _tool(
        "List notifications of the authenticated user.",
        _schema(
            {"status": {"type": "string", "enum": ["unread", "read", "pinned", "all"], "default": "unread"}},
            repo=False,
            paged=True,
        ),
    ),
    "notification_mark_read": _tool(
        "Mark one notification thread (by id) or all notifications as read.",
        _schema({"id": _ID}, repo=False),
    ),
    # Releases
    "release_list": _tool("List releases.", _schema({}, paged=True)),
    "release_get": _tool("Get a release by ID.", _schema({"id": _ID}, ["id"])),
    "release_create": _tool(
        "Create a release for a tag (the tag is created from target_commitish if missing).",
        _schema(
            {
                "tag_name": _NAME,
                "name": _TEXT,
                "body": _TEXT,
                "draft": {"type": "boolean", "default": False},
                "prerelease": {"type": "boolean", "default": False},
                "target_commitish": _TEXT,
            },
            ["tag_name"],
        ),
    ),
    # Repository
    "repo_get": _tool("Get repository metadata.", _schema({})),
    "repo_search": _tool(
        "Search repositories visible to the authenticated user.",
        _schema({"q": _NAME}, ["q"], repo=False, paged=True),
    ),
    # Users
    "user_get_me": _tool("Get the authenticated user.", _schema({}, repo=False)),
    "user_get": _tool("Get a user by username.", _schema({"username": _NAME}, ["username"], repo=False)),
    # Tags
    "tag_list": _tool("List tags.", _schema({}, paged=True)),
    "tag_create": _tool(
        "Create a tag. Providing a message creates an annotated tag.",
        _schema({"tag_name": _NAME, "target": _TEXT, "message": _TEXT}, ["tag_name"]),
    ),
    # Wiki
    "wiki_list": _tool("List wiki pages.", _schema({})),
    "wiki_get": _tool("Get a wiki page's content by slug.", _schema({"slug": _NAME}, ["slug"])),
    "wiki_create": _tool(
        "Create a wiki page.",
        _schema({"title": _NAME, "content": _TEXT}, ["title", "content"]),
    ),
    # Organizations
    "org_list": _tool("List organizations of the authenticated user.", _schema({}, repo=False)),
    "org_get": _tool("Get an organization.", _schema({"org": _NAME}, ["org"], repo=False)),
    "org_teams": _tool("List teams of an organization.", _schema({"org": _NAME}, ["org"], repo=False)),
    # Actions
    "actions_workflow_list": _tool(
        "List CI workflows (recent action tasks, or the workflow files when there are none).",
        _schema({}),
    ),
    "actions_run_list": _tool("List CI workflow runs.", _schema({}, paged=True)),
    "actions_run_get": _tool("Get a CI workflow run.", _schema({"run_id": _ID}, ["run_id"])),
    "actions_job_logs": _tool("Get the raw logs of a CI job.", _schema({"job_id": _ID}, ["job_id"])),
}

REPO_FREE_TOOLS: frozenset[str] = frozenset(
    name for name, meta in TOOL_METADATA.items() if "owner" not in meta["inputSchema"]["properties"]
)
