"""CLI 진입점

명령행 인터페이스를 통한 저장소 분석 실행을 제공합니다.
"""

import argparse
import sys
import logging
from typing import List, Optional

from gitpulse.cache.score_cache import ScoreCache
from gitpulse.commit_collection.analysis_scope import AnalysisScope
from gitpulse.config.settings import GitPulseConfig, load_config, load_config_for_repo
from gitpulse.pipeline.analyzer import AnalysisError, Analyzer
from gitpulse.pipeline.progress import AnalysisProgress
from gitpulse.pipeline.report import AnalysisReport, CostEstimate


def setup_logging(level: str = "INFO", log_format: Optional[str] = None) -> None:
    """로깅 설정

    Args:
        level: 로그 레벨
        log_format: 로그 포맷 (기본값: 설정 파일의 logging.format)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=log_format or "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)]
    )


def print_progress(progress: AnalysisProgress) -> None:
    """진행 상황 한 줄 출력"""
    if progress.total:
        print(f"[{progress.phase.value.upper()}] {progress.current}/{progress.total} {progress.message}")
    else:
        print(f"[{progress.phase.value.upper()}] {progress.message}")


def print_estimate(estimate: CostEstimate) -> None:
    print("[ESTIMATE] 분석 비용 추정")
    print(f"  전체 커밋: {estimate.total_commits}")
    print(f"  캐시된 커밋: {estimate.cached_commits}")
    print(f"  분석 대상: {estimate.to_analyze}")
    print(f"  예상 LLM 호출: {estimate.estimated_llm_calls}")
    print(f"  예상 토큰: {estimate.estimated_tokens:,}")
    print(f"  예상 비용: ${estimate.estimated_cost:.4f} (커밋당 ${estimate.cost_per_commit:.4f})")


def print_report_summary(report: AnalysisReport) -> None:
    summary = report.summary
    print("[SUCCESS] 분석이 완료되었습니다.")
    print(f"  작성자 수: {summary.total_authors}, 평균 {summary.average_score:.1f}점, 중앙값 {summary.median_score:.1f}점")
    for author in report.authors:
        score = author.score
        print(
            f"  - {score.author_name} <{score.author_email}>: {score.overall_score:.1f}점 "
            f"({score.commit_count}개 커밋, 추세 {score.trend.direction.value})"
        )


def build_scope(args: argparse.Namespace) -> AnalysisScope:
    return AnalysisScope(
        branch=args.branch,
        since=args.since,
        until=args.until,
        authors=list(args.author or []),
        max_commits=args.max_commits,
        path=args.path,
    )


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitpulse",
        description="커밋 diff를 LLM으로 채점하여 작성자별 기여 품질을 분석합니다",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
사용 예시:
  gitpulse .                               # 현재 저장소 분석
  gitpulse . --estimate                    # 비용 추정만
  gitpulse . --since 2024-01-01 -o out.json
  gitpulse . --author alice@example.com --max-commits 200
        """
    )

    parser.add_argument("repo_path", nargs="?", default=".", help="분석할 저장소 경로 (기본값: .)")
    parser.add_argument("--config", "-c", type=str, default=None, help="설정 파일 경로")
    parser.add_argument("--estimate", action="store_true", help="LLM 호출 없이 비용만 추정")
    parser.add_argument("--no-cache", action="store_true", help="캐시된 점수를 사용하지 않고 다시 채점")
    parser.add_argument("--clear-cache", action="store_true", help="저장소의 점수 캐시 삭제 후 종료")
    parser.add_argument("--output", "-o", type=str, default=None, help="JSON 리포트 저장 경로")
    parser.add_argument(
        "--log-level", "-l",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="로그 레벨 (기본값: 설정 파일 값)"
    )

    scope_group = parser.add_argument_group("분석 범위")
    scope_group.add_argument("--branch", type=str, default=None, help="분석할 브랜치 또는 리비전")
    scope_group.add_argument("--since", type=str, default=None, help="시작 날짜 (git --since 형식)")
    scope_group.add_argument("--until", type=str, default=None, help="종료 날짜 (git --until 형식)")
    scope_group.add_argument("--author", action="append", help="작성자 필터 (여러 번 지정 가능)")
    scope_group.add_argument("--max-commits", type=int, default=None, help="최대 커밋 수")
    scope_group.add_argument("--path", type=str, default=None, help="특정 경로의 변경만 분석")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """메인 함수"""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config: GitPulseConfig = load_config(args.config) if args.config else load_config_for_repo(args.repo_path)
    except (FileNotFoundError, ValueError) as e:
        print(f"[ERROR] 설정을 로드할 수 없습니다: {e}")
        sys.exit(1)

    setup_logging(args.log_level or config.logging.level, config.logging.format)
    log_level = args.log_level or config.logging.level

    try:
        if args.clear_cache:
            ScoreCache(args.repo_path, config.cache.resolve_directory()).clear()
            print("[CACHE] 점수 캐시를 삭제했습니다.")
            return

        scope = build_scope(args)

        if args.estimate:
            analyzer = Analyzer.create(args.repo_path, config, no_cache=args.no_cache, with_oracle=False)
            print_estimate(analyzer.estimate(scope))
            return

        analyzer = Analyzer.create(args.repo_path, config, no_cache=args.no_cache)
        report = analyzer.analyze(scope, on_progress=print_progress)

        if args.output:
            report.save_to_json(args.output)
            print(f"[OUTPUT] 리포트를 저장했습니다: {args.output}")

        print_report_summary(report)

    except AnalysisError as e:
        print(f"[ERROR] {e}")
        if e.failures:
            print("[HINT] 완료된 단위는 캐시에 저장되었습니다. 다시 실행하면 실패한 단위만 채점합니다.")
        else:
            print(f"[HINT] {e.phase.value} 단계에서 중단되었습니다 ({e.current}/{e.total}). "
                  "저장소 경로와 git 상태를 확인한 뒤 다시 실행하세요.")
        sys.exit(1)
    except Exception as e:
        print(f"[ERROR] 실행 중 오류가 발생했습니다: {e}")
        if log_level.upper() == "DEBUG":
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
