"""Git 커밋 추출기

git 명령어를 실행하여 분석 범위의 커밋 목록과 커밋별 변경 내용을 추출합니다.
출력 파싱은 테스트 가능한 순수 함수로 분리되어 있습니다.
"""

import logging
import re
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .analysis_scope import AnalysisScope
from .commit_diff import CommitDiff
from .commit_info import AuthorInfo, CommitInfo
from .file_diff import FileDiff, FileStatus

logger = logging.getLogger(__name__)

RECORD_SEPARATOR = '\x1e'
FIELD_SEPARATOR = '\x1f'

# 해시, 부모 해시, 작성자 이름, 이메일, 작성일(ISO 8601), ref, 전체 메시지
LOG_FORMAT = '%x1e%H%x1f%P%x1f%an%x1f%ae%x1f%aI%x1f%D%x1f%B'

GIT_TIMEOUT_SECONDS = 60

# 머지 커밋은 첫 번째 부모 기준 변경 내용을 사용
DIFF_OPTIONS = ['--format=', '-M', '--diff-merges=first-parent']

_BRACE_RENAME_PATTERN = re.compile(r'^(.*)\{(.*) => (.*)\}(.*)$')


class GitCommandError(RuntimeError):
    """git 명령어 실행 실패"""

    def __init__(self, command: List[str], returncode: int, stderr: str):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"git command failed ({returncode}): {' '.join(command)}\n{stderr.strip()}")


def parse_log_output(output: str) -> List[CommitInfo]:
    """git log 출력 파싱

    Args:
        output: LOG_FORMAT으로 출력한 git log 결과

    Returns:
        List[CommitInfo]: 출력 순서의 커밋 목록
    """
    commits = []

    for record in output.split(RECORD_SEPARATOR):
        if not record.strip():
            continue

        parts = record.split(FIELD_SEPARATOR, 6)
        if len(parts) != 7:
            logger.warning(f"커밋 레코드 파싱 실패: {record[:80]!r}")
            continue

        commit_hash, parents, name, email, date_str, refs, message = parts
        commits.append(CommitInfo(
            hash=commit_hash.strip(),
            author=AuthorInfo(name=name, email=email),
            date=datetime.fromisoformat(date_str.strip()),
            message=message.strip(),
            parent_hashes=parents.split(),
            refs=refs.strip(),
        ))

    return commits


def resolve_rename_path(path: str) -> Tuple[Optional[str], str]:
    """numstat 경로 표기에서 (이전 경로, 현재 경로) 추출

    "src/{a.py => b.py}" 또는 "a.py => b.py" 형식을 처리합니다.
    """
    match = _BRACE_RENAME_PATTERN.match(path)
    if match:
        prefix, old, new, suffix = match.groups()
        old_path = (prefix + old + suffix).replace('//', '/')
        new_path = (prefix + new + suffix).replace('//', '/')
        return old_path, new_path

    if ' => ' in path:
        old_path, new_path = path.split(' => ', 1)
        return old_path, new_path

    return None, path


def parse_numstat_output(output: str) -> Dict[str, Tuple[int, int, bool]]:
    """git show --numstat 출력 파싱

    Returns:
        현재 경로 → (추가 줄 수, 삭제 줄 수, 바이너리 여부)
    """
    stats: Dict[str, Tuple[int, int, bool]] = {}

    for line in output.splitlines():
        if not line.strip():
            continue

        parts = line.split('\t', 2)
        if len(parts) != 3:
            continue

        added, deleted, raw_path = parts
        _, path = resolve_rename_path(raw_path)

        if added == '-' and deleted == '-':
            stats[path] = (0, 0, True)
        else:
            stats[path] = (int(added), int(deleted), False)

    return stats


def parse_name_status_output(output: str) -> List[Tuple[FileStatus, str, Optional[str]]]:
    """git show --name-status 출력 파싱

    Returns:
        (상태, 현재 경로, 이전 경로) 목록
    """
    entries = []

    for line in output.splitlines():
        if not line.strip():
            continue

        parts = line.split('\t')
        status = FileStatus.from_git_code(parts[0])

        if status in (FileStatus.RENAMED, FileStatus.COPIED) and len(parts) >= 3:
            entries.append((status, parts[2], parts[1]))
        elif len(parts) >= 2:
            entries.append((status, parts[1], None))

    return entries


def split_patch_by_file(patch: str) -> Dict[str, str]:
    """git show --patch 출력을 파일별 패치로 분리

    Returns:
        현재 경로 → 해당 파일의 패치 텍스트
    """
    sections: Dict[str, str] = {}
    current_path: Optional[str] = None
    current_lines: List[str] = []

    def flush():
        if current_path is not None:
            sections[current_path] = '\n'.join(current_lines)

    for line in patch.splitlines():
        if line.startswith('diff --git '):
            flush()
            header = line[len('diff --git '):]
            current_path = header.split(' b/', 1)[1] if ' b/' in header else header
            current_lines = [line]
            continue

        if current_path is None:
            continue

        if line.startswith('+++ b/'):
            current_path = line[len('+++ b/'):]
        current_lines.append(line)

    flush()
    return sections


class CommitExtractor:
    """git 저장소 커밋 추출기"""

    def __init__(self, repo_path: Union[str, Path]):
        self.repo_path = Path(repo_path).resolve()
        self.logger = logging.getLogger(__name__)

    def list_commits(self, scope: AnalysisScope) -> List[CommitInfo]:
        """분석 범위의 커밋 목록 (git log 순서, 최신 커밋 먼저)"""
        args = ['log', f'--format={LOG_FORMAT}']

        if scope.max_commits:
            args.append(f'--max-count={scope.max_commits}')
        if scope.since:
            args.append(f'--since={scope.since}')
        if scope.until:
            args.append(f'--until={scope.until}')
        for author in scope.authors:
            args.append(f'--author={author}')
        if scope.branch:
            args.append(scope.branch)
        if scope.path:
            args.extend(['--', scope.path])

        commits = parse_log_output(self._run_git(args))
        self.logger.info(f"수집된 커밋 수: {len(commits)}")
        return commits

    def get_diff(self, commit: CommitInfo) -> CommitDiff:
        """커밋 하나의 파일별 변경 내용 추출"""
        numstat = parse_numstat_output(
            self._run_git(['show', '--numstat', *DIFF_OPTIONS, commit.hash])
        )
        name_status = parse_name_status_output(
            self._run_git(['show', '--name-status', *DIFF_OPTIONS, commit.hash])
        )
        patches = split_patch_by_file(
            self._run_git(['show', '--patch', *DIFF_OPTIONS, commit.hash])
        )

        files = []
        for status, path, old_path in name_status:
            additions, deletions, is_binary = numstat.get(path, (0, 0, False))
            files.append(FileDiff(
                path=path,
                status=status,
                additions=additions,
                deletions=deletions,
                content='' if is_binary else patches.get(path, ''),
                is_binary=is_binary,
                old_path=old_path,
            ))

        return CommitDiff.create(commit, files)

    def extract(self, scope: AnalysisScope) -> List[CommitDiff]:
        """분석 범위의 모든 커밋 변경 내용 추출"""
        return [self.get_diff(commit) for commit in self.list_commits(scope)]

    def _run_git(self, args: List[str]) -> str:
        """git 명령어 실행

        Raises:
            GitCommandError: 종료 코드가 0이 아니거나 시간 초과인 경우
        """
        command = ['git', *args]
        try:
            result = subprocess.run(
                command,
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                timeout=GIT_TIMEOUT_SECONDS,
            )
        except subprocess.TimeoutExpired:
            raise GitCommandError(command, -1, f"Command timed out after {GIT_TIMEOUT_SECONDS} seconds")
        except FileNotFoundError as e:
            raise GitCommandError(command, -1, str(e)) from e

        if result.returncode != 0:
            raise GitCommandError(command, result.returncode, result.stderr or '')

        return result.stdout
