"""
Export-and-commit orchestration.

``CommitOrchestrator.export_and_commit`` turns one CommitRequest into at
most one commit on GitHub. It runs a fixed sequence of steps; each step
either returns a terminal CommitResult or lets the request continue:

1. validate filename, credential, target and commit message
2. resolve the folder into its storage and commit-path forms
3. probe the folder for a file in the way (non-root folders only)
4. check pull request preconditions
5. remember the selection
6. export the files for the requested scope
7. require exactly one file
8. refuse empty exports, with a diagnostic
9. skip the commit when the remote already matches (304)
10. commit, retrying once after a fast-forward race
11. record the commit signature
12. open the pull request, if requested

Nothing raises past ``export_and_commit``; an unexpected error becomes a
result with ``status=0``.
"""

from __future__ import annotations

import json
import logging
import re
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from tokensync.core.config.models import PublishConfig
from tokensync.core.export.equivalence import contains_typography_tokens, contents_match
from tokensync.core.export.filenames import validate_filename
from tokensync.core.export.folders import resolve_folder
from tokensync.core.export.matching import pick_export_file, pretty_export_name
from tokensync.core.export.models import ExportFile, ExportFormat, Scope, SelectionDiagnostics
from tokensync.core.export.source import ExportPipeline, SelectionAnalyzer
from tokensync.core.github.models import CommitFile, CommitFilesResult
from tokensync.core.github.protocol import ForgeClient
from tokensync.core.publish.models import (
    CommitRequest,
    CommitResult,
    CreatedPullRequest,
    ExportFilesRequest,
    ExportFilesResult,
)
from tokensync.core.publish.prober import ensure_folder_writable
from tokensync.core.session.manager import ForgeSession
from tokensync.core.state.models import CommitSignature
from tokensync.core.state.store import SelectionStore

logger = logging.getLogger(__name__)

_FAST_FORWARD_RACE = re.compile(r"not a fast forward", re.IGNORECASE)

CHOOSE_SELECTION_MESSAGE = "GitHub: choose collection and mode before exporting."
SINGLE_FILE_MESSAGE = (
    "GitHub: Custom filename requires a single export file. "
    "Adjust scope or disable extra formats."
)
EMPTY_TYPOGRAPHY_MESSAGE = (
    "GitHub export warning: typography.json is empty (no local text styles). Nothing to commit."
)
EMPTY_EXPORT_MESSAGE = (
    "Export produced an empty tokens file. Ensure this file contains local Variables with values."
)


def serialize_export(document: object) -> str:
    """Text written to the repository for one exported document."""
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def is_fast_forward_race(result: CommitFilesResult) -> bool:
    return (
        not result.ok
        and result.status == 422
        and isinstance(result.message, str)
        and bool(_FAST_FORWARD_RACE.search(result.message))
    )


@dataclass
class _CommitPlan:
    """Request state refined step by step."""

    owner: str
    repo: str
    branch: str
    folder: str
    filename: str | None
    commit_message: str = ""
    scope: Scope = Scope.SELECTED
    collection: str = ""
    mode: str = ""
    style_dictionary: bool = False
    flat_tokens: bool = False
    create_pr: bool = False
    pr_base: str = ""
    pr_title: str = ""
    pr_body: str | None = None
    folder_path: str = ""
    full_path: str | None = None
    same_target_as_last_commit: bool = False
    files: list[ExportFile] = field(default_factory=list)
    commit_files: list[CommitFile] = field(default_factory=list)

    def fail(self, status: int, message: str) -> CommitResult:
        return CommitResult(
            ok=False,
            owner=self.owner,
            repo=self.repo,
            branch=self.branch,
            folder=self.folder,
            filename=self.filename,
            full_path=self.full_path,
            status=status,
            message=message,
        )

    def no_changes(self) -> CommitResult:
        if self.scope == Scope.SELECTED:
            message = (
                f'No token values changed for "{self.collection}" / "{self.mode}"; '
                "repository already matches the current export."
            )
        else:
            message = "No token values changed; repository already matches the current export."
        return self.fail(304, message)


Step = Callable[[ForgeSession, _CommitPlan], CommitResult | None]


class CommitOrchestrator:
    """
    Publish token exports to a GitHub branch.

    Example:
        >>> orchestrator = CommitOrchestrator(client, store, DirectoryExportSource(root))
        >>> result = orchestrator.export_and_commit(
        ...     session,
        ...     CommitRequest(owner="acme", repo="design", branch="main", scope="all"),
        ... )
        >>> result.commit_url if result.ok else result.message
    """

    def __init__(
        self,
        client: ForgeClient,
        store: SelectionStore,
        pipeline: ExportPipeline,
        analyzer: SelectionAnalyzer | None = None,
        *,
        config: PublishConfig | None = None,
        on_selection_saved: Callable[[], None] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize CommitOrchestrator.

        Args:
            client: Forge client used for every remote call
            store: Selection and commit signature store
            pipeline: Source of exported token documents
            analyzer: Explains empty selected-scope exports
            config: Publish defaults (filename, commit message, retry delay)
            on_selection_saved: Called after the selection was remembered
            sleep: Sleep function, injectable for tests
        """
        self.client = client
        self.store = store
        self.pipeline = pipeline
        self.analyzer = analyzer
        self.config = config or PublishConfig()
        self.on_selection_saved = on_selection_saved
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Export preview
    # ------------------------------------------------------------------

    def export_files(self, request: ExportFilesRequest) -> ExportFilesResult:
        """
        Return the files an export of ``request`` would contain.

        For the selected scope this is the matching per-mode file, or every
        per-mode file when none matches.
        """
        try:
            if request.scope == Scope.ALL:
                bundle = self.pipeline.export(
                    ExportFormat.SINGLE,
                    style_dictionary=request.style_dictionary,
                    flat_tokens=request.flat_tokens,
                )
                return ExportFilesResult(files=bundle.files)
            if request.scope == Scope.TYPOGRAPHY:
                return ExportFilesResult(files=self.pipeline.export(ExportFormat.TYPOGRAPHY).files)

            if not request.collection or not request.mode:
                return ExportFilesResult(files=[], message=CHOOSE_SELECTION_MESSAGE)
            per_mode = self.pipeline.export(
                ExportFormat.PER_MODE,
                style_dictionary=request.style_dictionary,
                flat_tokens=request.flat_tokens,
            )
            picked = pick_export_file(per_mode.files, request.collection, request.mode)
            return ExportFilesResult(files=[picked] if picked else per_mode.files)
        except Exception as e:
            logger.exception("Export failed")
            return ExportFilesResult(
                files=[], message=f"GitHub export failed: {str(e) or 'Failed to export'}"
            )

    # ------------------------------------------------------------------
    # Export and commit
    # ------------------------------------------------------------------

    def export_and_commit(self, session: ForgeSession, request: CommitRequest) -> CommitResult:
        """
        Export tokens for ``request`` and commit them when they changed.

        Args:
            session: Session holding the GitHub credential
            request: Target and export options

        Returns:
            CommitResult; ``ok`` is True only when a commit was written
        """
        plan = _CommitPlan(
            owner=request.owner,
            repo=request.repo,
            branch=request.branch,
            folder=request.folder,
            filename=request.filename,
        )
        try:
            planned = self._validate(session, request, plan)
            if planned is not None:
                return self._finish(planned)

            steps: list[Step] = [
                self._resolve_folder,
                self._probe_folder,
                self._check_pull_request,
                self._remember_selection,
                self._build_files,
                self._check_single_file,
                self._check_not_empty,
                self._check_unchanged,
            ]
            for step in steps:
                terminal = step(session, plan)
                if terminal is not None:
                    return self._finish(terminal)

            return self._finish(self._commit(session, plan))
        except Exception as e:
            logger.exception("Export and commit failed for %s/%s", plan.owner, plan.repo)
            return self._finish(plan.fail(0, str(e) or "unknown error"))

    def _finish(self, result: CommitResult) -> CommitResult:
        if result.ok:
            logger.info(
                "Committed %s to %s/%s@%s", result.full_path, result.owner, result.repo, result.branch
            )
        elif result.status == 304:
            logger.info("%s", result.message)
        else:
            logger.warning("Commit not written (%s): %s", result.status, result.message)
        return result

    def _validate(
        self, session: ForgeSession, request: CommitRequest, plan: _CommitPlan
    ) -> CommitResult | None:
        stored = self.store.get_selected()

        if request.filename is not None:
            candidate: str | None = request.filename
        else:
            candidate = stored.filename
        check = validate_filename(candidate if candidate is not None else self.config.default_filename)
        if not check.ok:
            plan.filename = candidate
            return plan.fail(400, check.message)
        plan.filename = check.filename

        if not session.token:
            return plan.fail(401, "No token")
        if not plan.owner or not plan.repo or not plan.branch:
            return plan.fail(400, "Missing owner/repo/branch")

        plan.commit_message = (request.commit_message or self.config.default_commit_message).strip()
        if not plan.commit_message:
            return plan.fail(400, "Empty commit message")

        plan.scope = request.scope
        plan.collection = request.collection or stored.collection or ""
        plan.mode = request.mode or stored.mode or ""
        plan.style_dictionary = request.style_dictionary
        plan.flat_tokens = request.flat_tokens
        plan.create_pr = request.create_pr
        plan.pr_base = request.pr_base if request.create_pr else ""
        plan.pr_title = (request.pr_title or plan.commit_message).strip() or plan.commit_message
        plan.pr_body = request.pr_body
        return None

    def _resolve_folder(self, session: ForgeSession, plan: _CommitPlan) -> CommitResult | None:
        resolved = resolve_folder(plan.folder)
        if isinstance(resolved, str):
            return plan.fail(400, resolved)
        plan.folder = resolved.storage
        plan.folder_path = resolved.path
        return None

    def _probe_folder(self, session: ForgeSession, plan: _CommitPlan) -> CommitResult | None:
        if not plan.folder_path:
            return None
        check = ensure_folder_writable(
            self.client, session.token or "", plan.owner, plan.repo, plan.branch, plan.folder_path
        )
        if not check.ok:
            return plan.fail(check.status or 400, check.message or "Folder is not writable")
        return None

    def _check_pull_request(self, session: ForgeSession, plan: _CommitPlan) -> CommitResult | None:
        if not plan.create_pr:
            return None
        if not plan.pr_base:
            return plan.fail(400, "Unable to determine target branch for pull request.")
        if plan.pr_base == plan.branch:
            return plan.fail(
                400,
                "Selected branch matches PR target branch. "
                "Choose a different branch before creating a PR.",
            )
        return None

    def _remember_selection(self, session: ForgeSession, plan: _CommitPlan) -> CommitResult | None:
        assert plan.filename is not None
        plan.full_path = (
            f"{plan.folder_path}/{plan.filename}" if plan.folder_path else plan.filename
        )
        last = self.store.get_last_commit_signature()
        plan.same_target_as_last_commit = last is not None and last.matches(
            plan.branch, plan.full_path, plan.scope
        )

        partial: dict[str, object] = {
            "owner": plan.owner,
            "repo": plan.repo,
            "branch": plan.branch,
            "folder": plan.folder,
            "filename": plan.filename,
            "commit_message": plan.commit_message,
            "scope": plan.scope,
            "style_dictionary": plan.style_dictionary,
            "flat_tokens": plan.flat_tokens,
            "create_pr": plan.create_pr,
            "pr_base": plan.pr_base if plan.create_pr else None,
            "pr_title": plan.pr_title if plan.create_pr else None,
            "pr_body": plan.pr_body if plan.create_pr else None,
        }
        if plan.collection:
            partial["collection"] = plan.collection
        if plan.mode:
            partial["mode"] = plan.mode
        self.store.merge_selected(partial)
        if self.on_selection_saved is not None:
            self.on_selection_saved()
        return None

    def _build_files(self, session: ForgeSession, plan: _CommitPlan) -> CommitResult | None:
        if plan.scope == Scope.ALL:
            bundle = self.pipeline.export(
                ExportFormat.SINGLE,
                style_dictionary=plan.style_dictionary,
                flat_tokens=plan.flat_tokens,
            )
            plan.files = list(bundle.files)
            return None
        if plan.scope == Scope.TYPOGRAPHY:
            plan.files = list(self.pipeline.export(ExportFormat.TYPOGRAPHY).files)
            return None

        if not plan.collection or not plan.mode:
            return plan.fail(400, "Pick a collection and a mode.")
        per_mode = self.pipeline.export(
            ExportFormat.PER_MODE,
            style_dictionary=plan.style_dictionary,
            flat_tokens=plan.flat_tokens,
        )
        picked = pick_export_file(per_mode.files, plan.collection, plan.mode)
        if picked is None:
            available = ", ".join(per_mode.names)
            return plan.fail(
                404,
                f'No export found for "{plan.collection}" / "{plan.mode}". Available: [{available}]',
            )
        plan.files = [picked]
        return None

    def _check_single_file(self, session: ForgeSession, plan: _CommitPlan) -> CommitResult | None:
        # A filename is always in effect, so more than one file cannot be written
        if len(plan.files) > 1:
            return plan.fail(400, SINGLE_FILE_MESSAGE)
        return None

    def _check_not_empty(self, session: ForgeSession, plan: _CommitPlan) -> CommitResult | None:
        if plan.files and not all(f.is_empty_object() for f in plan.files):
            return None
        if plan.scope == Scope.TYPOGRAPHY:
            return plan.fail(412, EMPTY_TYPOGRAPHY_MESSAGE)
        if plan.scope == Scope.SELECTED:
            diag = (
                self.analyzer.analyze_selection_state(plan.collection, plan.mode)
                if self.analyzer is not None
                else SelectionDiagnostics(ok=False)
            )
            if diag.ok:
                tail = (
                    f'Found {diag.variable_count} variable(s) in "{plan.collection}", '
                    f'but {diag.variables_with_values or 0} with a value in "{plan.mode}".'
                )
            else:
                tail = diag.message or "No values present."
            return plan.fail(
                412,
                f'Export for "{plan.collection}" / "{plan.mode}" produced an empty tokens file. {tail}',
            )
        return plan.fail(412, EMPTY_EXPORT_MESSAGE)

    def _check_unchanged(self, session: ForgeSession, plan: _CommitPlan) -> CommitResult | None:
        assert plan.filename is not None
        prefix = f"{plan.folder_path}/" if plan.folder_path else ""
        single = len(plan.files) == 1
        plan.commit_files = [
            CommitFile(
                path=prefix + (plan.filename if single else pretty_export_name(f.name)),
                content=serialize_export(f.json_data),
            )
            for f in plan.files
        ]

        if not plan.same_target_as_last_commit:
            return None
        for commit_file in plan.commit_files:
            if self._remote_differs(session, plan, commit_file):
                return None
        return plan.no_changes()

    def _remote_differs(
        self, session: ForgeSession, plan: _CommitPlan, commit_file: CommitFile
    ) -> bool:
        current = self.client.get_file_contents(
            session.token or "", plan.owner, plan.repo, plan.branch, commit_file.path
        )
        if not current.ok:
            if current.status != 404:
                logger.info(
                    "Could not read %s (%s); assuming it changed", commit_file.path, current.status
                )
            return True
        if (
            plan.scope == Scope.TYPOGRAPHY
            and contains_typography_tokens(commit_file.content)
            and not contains_typography_tokens(current.content_text)
        ):
            return True
        return not contents_match(current.content_text, commit_file.content)

    def _attempt_commit(self, session: ForgeSession, plan: _CommitPlan) -> CommitFilesResult:
        return self.client.commit_files(
            session.token or "",
            plan.owner,
            plan.repo,
            plan.branch,
            plan.commit_message,
            plan.commit_files,
        )

    def _commit(self, session: ForgeSession, plan: _CommitPlan) -> CommitResult:
        res = self._attempt_commit(session, plan)
        retried = False
        if is_fast_forward_race(res):
            logger.info("Branch %s moved during commit, retrying once", plan.branch)
            self._sleep(self.config.race_retry_delay_ms / 1000)
            res = self._attempt_commit(session, plan)
            retried = True

        if not res.ok:
            if is_fast_forward_race(res) and plan.same_target_as_last_commit:
                return plan.no_changes()
            logger.warning(
                "GitHub: Commit failed (%s): %s%s",
                res.status,
                res.message,
                " (after retry)" if retried else "",
            )
            failure = plan.fail(res.status, res.message or f"HTTP {res.status}")
            return failure.model_copy(update={"rate": res.rate})

        assert plan.full_path is not None
        self.store.set_last_commit_signature(
            CommitSignature(branch=plan.branch, full_path=plan.full_path, scope=plan.scope)
        )

        result = CommitResult(
            ok=True,
            owner=plan.owner,
            repo=plan.repo,
            branch=plan.branch,
            folder=plan.folder,
            filename=plan.filename,
            full_path=plan.full_path,
            status=res.status,
            commit_sha=res.commit_sha,
            commit_url=res.commit_url,
            tree_url=res.tree_url,
            rate=res.rate,
        )
        if not plan.create_pr:
            return result

        pr = self.client.create_pull_request(
            session.token or "",
            plan.owner,
            plan.repo,
            title=plan.pr_title,
            head=plan.branch,
            base=plan.pr_base,
            body=plan.pr_body or "",
        )
        if pr.ok:
            logger.info("PR created: %s", pr.url)
            created = CreatedPullRequest(number=pr.number, url=pr.url, base=pr.base, head=pr.head)
            return result.model_copy(update={"created_pr": created, "pull_request": pr})
        logger.warning("GitHub: PR creation failed (%s): %s", pr.status, pr.message)
        return result.model_copy(update={"pull_request": pr})
