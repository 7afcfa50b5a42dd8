"""
CLI 명령어 처리 모듈

운영자용 CLI:
- stages: 창업 여정 단계 목록
- estimate: 예상 창업 비용 산출
- seed: 샘플 기준 데이터 입력
- advance / set-stage / cancel: PM 단계 진행
- show: 프로젝트 상태 조회
- pm-projects / pm-availability: PM 담당 프로젝트, 배정 가능 여부
"""

import argparse
import sys
from dataclasses import dataclass
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .. import __version__
from ..core.error_handler import ErrorHandler, RecoveryAction
from ..core.exceptions import OpeningError
from ..core.logging import setup_logger
from ..domain.estimator import format_price
from ..domain.models import ProjectStatus, StoreFloor
from ..domain.stages import STAGES, stage_label
from ..notifications.events import EventEmitter
from ..notifications.slack_notifier import SlackNotifier, SlackNotifierConfig
from ..repository import get_repository
from ..services.assignment import PMAssignmentService, policy_from_name
from ..services.messaging import MessageService
from ..services.projects import ProjectService
from ..settings import AppSettings, get_settings


@dataclass
class CLIContext:
    """명령어 실행에 필요한 객체 묶음"""
    console: Console
    repository: object
    service: ProjectService
    settings: AppSettings


def build_context(settings: AppSettings, console: Console = None, repository=None) -> CLIContext:
    """설정 기준으로 저장소/서비스 조립"""
    repository = repository or get_repository(settings)
    emitter = EventEmitter()

    notifier = SlackNotifier(SlackNotifierConfig(webhook_url=settings.slack_webhook_url))
    notifier.subscribe(emitter)

    assigner = PMAssignmentService(repository, policy_from_name(settings.assignment_policy), emitter)
    messages = MessageService(repository, emitter=emitter)
    service = ProjectService(repository, assigner=assigner, messages=messages, emitter=emitter)
    return CLIContext(console or Console(), repository, service, settings)


def create_parser() -> argparse.ArgumentParser:
    """CLI 파서 생성"""
    parser = argparse.ArgumentParser(
        prog="opening",
        description="오프닝 - 강남구 창업 여정 관리",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
예시:
  # 단계 목록
  %(prog)s stages

  # 카페 15평 1층 예상 비용
  %(prog)s estimate --category cafe --size 15 --floor 1f

  # PM 단계 진행
  %(prog)s advance <project_id>
  %(prog)s set-stage <project_id> 9
"""
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="상세 로그 출력"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="사용 가능한 명령어")

    subparsers.add_parser("stages", help="창업 여정 단계 목록")

    estimate_parser = subparsers.add_parser("estimate", help="예상 창업 비용 산출")
    estimate_parser.add_argument("--category", required=True, help="업종 (cafe, korean, chicken ...)")
    estimate_parser.add_argument("--size", type=float, required=True, help="매장 평수")
    estimate_parser.add_argument(
        "--floor",
        choices=[f.value for f in StoreFloor],
        default=StoreFloor.GROUND.value,
        help="층수 (기본: 1f)"
    )
    estimate_parser.add_argument("--district", default=None, help="구 단위 지역 (기본: 강남구)")

    subparsers.add_parser("seed", help="샘플 기준 데이터 입력 (비용 기준, PM, 협력업체)")

    advance_parser = subparsers.add_parser("advance", help="다음 단계로 진행")
    advance_parser.add_argument("project_id", help="프로젝트 ID")
    advance_parser.add_argument("--expected-version", type=int, default=None, help="기대 버전 (충돌 검사)")
    advance_parser.add_argument("--silent", action="store_true", help="채팅 시스템 메시지 생략")

    set_stage_parser = subparsers.add_parser("set-stage", help="지정 단계로 이동 (7~12)")
    set_stage_parser.add_argument("project_id", help="프로젝트 ID")
    set_stage_parser.add_argument("stage", type=int, help="이동할 단계")
    set_stage_parser.add_argument("--expected-version", type=int, default=None, help="기대 버전 (충돌 검사)")
    set_stage_parser.add_argument("--silent", action="store_true", help="채팅 시스템 메시지 생략")

    cancel_parser = subparsers.add_parser("cancel", help="프로젝트 취소")
    cancel_parser.add_argument("project_id", help="프로젝트 ID")
    cancel_parser.add_argument("--reason", default="", help="취소 사유")

    show_parser = subparsers.add_parser("show", help="프로젝트 상태 조회")
    show_parser.add_argument("project_id", help="프로젝트 ID")

    pm_projects_parser = subparsers.add_parser("pm-projects", help="PM 담당 프로젝트 목록")
    pm_projects_parser.add_argument("pm_id", help="PM ID")
    pm_projects_parser.add_argument(
        "--status",
        choices=[s.value for s in ProjectStatus],
        default=None,
        help="상태 필터"
    )

    availability_parser = subparsers.add_parser("pm-availability", help="PM 배정 가능 여부 변경")
    availability_parser.add_argument("pm_id", help="PM ID")
    availability_parser.add_argument("state", choices=["on", "off"], help="on: 배정 가능, off: 배정 중지")

    return parser


# ========== 명령어 ==========

def cmd_stages(args, ctx: CLIContext):
    """단계 목록"""
    table = Table(title="🚀 창업 여정 단계")
    table.add_column("단계", justify="right", style="cyan")
    table.add_column("이름", style="bold")
    table.add_column("진행", style="magenta")
    table.add_column("설명")

    for info in STAGES.values():
        table.add_row(str(info.step), info.label, "고객" if info.is_onboarding else "PM", info.description)

    ctx.console.print(table)


def cmd_estimate(args, ctx: CLIContext):
    """예상 비용 산출"""
    result = ctx.service.estimate(
        args.category,
        args.size,
        StoreFloor(args.floor),
        args.district,
    )

    if not result.available:
        ctx.console.print(f"[yellow]⚠️ 견적 불가: {escape(result.reason)}[/yellow]")
        return

    table = Table(title=f"💰 예상 창업 비용 ({args.category}, {args.size:g}평, {args.floor})")
    table.add_column("항목", style="cyan")
    table.add_column("세부")
    table.add_column("최소", justify="right")
    table.add_column("평균", justify="right", style="green")
    table.add_column("최대", justify="right")

    for group in result.groups:
        for line in group.items:
            table.add_row(group.category, line.name, format_price(line.min), format_price(line.avg), format_price(line.max))
        table.add_row(
            f"[bold]{group.category} 소계[/bold]", "",
            format_price(group.subtotal.min), format_price(group.subtotal.avg), format_price(group.subtotal.max),
        )

    ctx.console.print(table)
    ctx.console.print(
        f"\n[bold]총 예상 비용:[/bold] {format_price(result.total.min)} ~ {format_price(result.total.max)} "
        f"(평균 [green]{format_price(result.total.avg)}[/green], {result.total.avg:,}원)"
    )


def cmd_seed(args, ctx: CLIContext):
    """샘플 데이터 입력"""
    counts = ctx.repository.seed_sample_data()
    ctx.console.print(
        f"✅ 비용 기준 {counts['cost_standards']}건, PM {counts['project_managers']}명, "
        f"협력업체 {counts['partners']}곳 추가"
    )


def cmd_advance(args, ctx: CLIContext):
    """다음 단계"""
    before = ctx.service.get_project(args.project_id)
    project = ctx.service.advance_stage(args.project_id, args.expected_version, notify=not args.silent)
    if project.current_step == before.current_step:
        ctx.console.print(f"[yellow]이미 마지막 단계입니다: {stage_label(project.current_step)}[/yellow]")
        return
    ctx.console.print(f"✅ {before.current_step} → {project.current_step} ({stage_label(project.current_step)})")


def cmd_set_stage(args, ctx: CLIContext):
    """지정 단계 이동"""
    project = ctx.service.set_stage(args.project_id, args.stage, args.expected_version, notify=not args.silent)
    ctx.console.print(f"✅ {project.current_step}단계로 이동 ({stage_label(project.current_step)})")


def cmd_cancel(args, ctx: CLIContext):
    """프로젝트 취소"""
    project = ctx.service.cancel_project(args.project_id, args.reason)
    ctx.console.print(f"🛑 프로젝트 취소됨: {project.id}")


def cmd_show(args, ctx: CLIContext):
    """프로젝트 조회"""
    project = ctx.service.get_project(args.project_id)

    table = Table(title=f"📋 프로젝트 {project.id}")
    table.add_column("항목", style="cyan")
    table.add_column("값")

    table.add_row("업종", project.business_category)
    table.add_row("위치", f"{project.location_district} {project.location_dong}")
    table.add_row("규모", f"{project.store_size:g}평 ({project.store_floor.value})")
    table.add_row("단계", f"{project.current_step} ({stage_label(project.current_step)})")
    table.add_row("상태", project.status.value)
    table.add_row("PM", project.pm_id or "-")
    table.add_row("예상 비용", f"{project.estimated_total:,}원")
    table.add_row("버전", str(project.version))
    table.add_row("마일스톤 진행률", f"{ctx.service.milestone_progress(project.id)}%")
    ctx.console.print(table)


def cmd_pm_projects(args, ctx: CLIContext):
    """PM 담당 프로젝트"""
    status = ProjectStatus(args.status) if args.status else None
    projects = ctx.service.list_pm_projects(args.pm_id, status)

    if not projects:
        ctx.console.print(f"[yellow]담당 프로젝트가 없습니다: {escape(args.pm_id)}[/yellow]")
        return

    table = Table(title=f"👤 PM {args.pm_id} 담당 프로젝트 ({len(projects)}건)")
    table.add_column("ID", style="cyan")
    table.add_column("업종")
    table.add_column("위치")
    table.add_column("단계")
    table.add_column("상태", style="magenta")
    table.add_column("생성일")

    for project in projects:
        table.add_row(
            project.id,
            project.business_category,
            project.location_dong,
            f"{project.current_step} ({stage_label(project.current_step)})",
            project.status.value,
            project.created_at.strftime("%Y-%m-%d"),
        )
    ctx.console.print(table)


def cmd_pm_availability(args, ctx: CLIContext):
    """PM 배정 가능 여부"""
    pm = ctx.service.assigner.set_availability(args.pm_id, args.state == "on")
    state = "배정 가능" if pm.is_available else "배정 중지"
    ctx.console.print(f"✅ {pm.name}: {state}")


COMMANDS = {
    "stages": cmd_stages,
    "estimate": cmd_estimate,
    "seed": cmd_seed,
    "advance": cmd_advance,
    "set-stage": cmd_set_stage,
    "cancel": cmd_cancel,
    "show": cmd_show,
    "pm-projects": cmd_pm_projects,
    "pm-availability": cmd_pm_availability,
}


def main(argv: Optional[List[str]] = None, console: Console = None, repository=None) -> int:
    """CLI 실행

    Returns:
        종료 코드 (0: 성공, 1: 처리 실패, 2: 사용법 오류)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    logger = setup_logger("opening", "DEBUG" if args.verbose else settings.log_level)

    if args.command is None:
        parser.print_help()
        return 2

    ctx = build_context(settings, console=console, repository=repository)
    handler = ErrorHandler(logger)

    try:
        COMMANDS[args.command](args, ctx)
    except OpeningError as e:
        action = handler.handle(e, {"command": args.command})
        ctx.console.print(f"[red]❌ {escape(str(e))}[/red]")
        if action == RecoveryAction.RETRY:
            ctx.console.print("[yellow]잠시 후 다시 시도해주세요.[/yellow]")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
