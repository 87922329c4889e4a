# arena/cli/admin.py
"""
관리자 명령행 도구 (turingarena-admin)

    turingarena-admin init-db [--drop]
    turingarena-admin import <contest dir> [--force]
    turingarena-admin view-contest [--contest NAME] [--username NAME]
    turingarena-admin list-users
    turingarena-admin add-user --username alice --name Alice --token secret [--admin] [--contest NAME]
    turingarena-admin delete-user alice
    turingarena-admin add-problem --name sum --path ./sum [--contest NAME]
    turingarena-admin delete-problem sum
"""
import argparse
import asyncio
import json
import logging
import sys
from logging.config import dictConfig

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from arena.core.config import CONFIG_FILE_NAME, load_settings
from arena.core.exceptions import ArenaError
from arena.database import init_db
from arena.models.user import UserPrivilege
from arena.repositories.contest import ContestRepository
from arena.schemas import UserCreateRequest
from arena.services import ContestService, UserService, ViewService
from arena.services.import_service import ContestImporter
from arena.utils.logger import cli_logger

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="turingarena-admin", description="TuringArena 관리 도구")
    parser.add_argument("--config", default=None, help=f"설정 파일 경로 (예: {CONFIG_FILE_NAME})")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init-db", help="테이블 생성")
    init_parser.add_argument("--drop", action="store_true", help="기존 테이블 삭제 후 생성")

    import_parser = subparsers.add_parser("import", help="대회 디렉토리 가져오기")
    import_parser.add_argument("path", help="turingarena.yaml 이 있는 대회 디렉토리")
    import_parser.add_argument("--force", action="store_true", help="기존 테이블을 모두 삭제하고 가져오기")

    view_parser = subparsers.add_parser("view-contest", help="대회 메인 뷰 출력 (JSON)")
    view_parser.add_argument("--contest", default=None, help="대회 이름 (없으면 기본 대회)")
    view_parser.add_argument("--username", default=None, help="사용자 (없으면 익명)")

    subparsers.add_parser("list-users", help="사용자 목록")

    add_user_parser = subparsers.add_parser("add-user", help="사용자 추가")
    add_user_parser.add_argument("--username", required=True)
    add_user_parser.add_argument("--name", required=True, help="표시 이름")
    add_user_parser.add_argument("--token", required=True)
    add_user_parser.add_argument("--admin", action="store_true", help="관리자 권한")
    add_user_parser.add_argument("--contest", default=None, help="참가시킬 대회 이름")

    delete_user_parser = subparsers.add_parser("delete-user", help="사용자 삭제")
    delete_user_parser.add_argument("username")

    add_problem_parser = subparsers.add_parser("add-problem", help="문제 디렉토리 추가")
    add_problem_parser.add_argument("--name", required=True)
    add_problem_parser.add_argument("--path", required=True, help="문제 디렉토리")
    add_problem_parser.add_argument("--contest", default=None, help="배정할 대회 이름")

    delete_problem_parser = subparsers.add_parser("delete-problem", help="문제 삭제")
    delete_problem_parser.add_argument("name")

    return parser


def print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


async def run_command(args: argparse.Namespace, session_factory: async_sessionmaker, engine) -> None:
    if args.command == "init-db":
        await init_db(engine, drop=args.drop)
        print("데이터베이스 초기화 완료")
        return

    if args.command == "import":
        await init_db(engine, drop=args.force)
        async with session_factory() as db:
            report = await ContestImporter().import_contest(db, args.path)
        print(
            f"대회 {report.contest} 가져오기 완료: "
            f"사용자 {len(report.users)}명, 문제 {len(report.problems)}개, 파일 {report.files}개"
        )
        return

    async with session_factory() as db:
        if args.command == "view-contest":
            contest = await ContestService().get_contest_or_default(db, args.contest)
            user = await UserService().resolve_user(db, args.username)
            view = await ViewService().main_view(db, contest, user)
            print(view.model_dump_json(indent=2))

        elif args.command == "list-users":
            users = await UserService().list_users(db, limit=10000)
            print_json(users.model_dump(mode="json"))

        elif args.command == "add-user":
            user = await UserService().create_user(db, UserCreateRequest(
                username=args.username,
                name=args.name,
                token=args.token,
                privilege=UserPrivilege.ADMIN if args.admin else UserPrivilege.USER,
            ))
            if args.contest:
                contest = await ContestService().get_contest(db, args.contest)
                await ContestRepository().add_participant(db, contest.contest_id, user.user_id)
                await db.commit()
            print_json(user.model_dump(mode="json"))

        elif args.command == "delete-user":
            await UserService().delete_user(db, args.username)
            print(f"사용자 {args.username} 삭제 완료")

        elif args.command == "add-problem":
            problem = await ContestImporter().add_problem(db, args.name, args.path, args.contest)
            print(f"문제 {problem.name} 추가 완료")

        elif args.command == "delete-problem":
            await ContestService().delete_problem(db, args.name)
            print(f"문제 {args.name} 삭제 완료")


async def async_main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.config)

    engine = create_async_engine(settings.DATABASE_URL)
    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    try:
        await run_command(args, session_factory, engine)
        return 0
    except ArenaError as e:
        logger.error(e.message)
        return 1
    finally:
        await engine.dispose()


def main(argv=None) -> None:
    dictConfig(cli_logger)
    sys.exit(asyncio.run(async_main(argv)))


if __name__ == "__main__":
    main()
