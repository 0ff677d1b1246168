import logging
import os
import sys
import json
import uuid
import argparse

from core.allocation.errors import AllocationError
from core.allocation.service import AssignmentOrchestrator
from core.config_loader import load_config
from database.database import get_engine, get_session_factory
from database.init_db import init_db

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def cmd_init_db(config, args) -> int:
    init_db(get_engine(config.database.url))
    return 0


def cmd_serve(config, args) -> int:
    os.environ.setdefault("STAFFALLOC_CONFIG", args.config)
    from web.backend.app import main as serve
    serve()
    return 0


def cmd_assign(config, args) -> int:
    """Run one assignment batch and print its summary as JSON."""
    try:
        position_ids = [uuid.UUID(p) for p in args.position_id]
    except ValueError as e:
        logger.error(f"Invalid position id: {e}")
        return 2

    orchestrator = AssignmentOrchestrator(get_session_factory(config.database.url), config.allocation)
    try:
        result = orchestrator.assign(position_ids, force=args.force)
    except AllocationError as e:
        print(json.dumps({"success": False, "error": e.message, "type": e.__class__.__name__}, ensure_ascii=False))
        return 1

    summary = {
        "success": True,
        "batch_id": result.batch_id,
        "state": result.state.value,
        "message": result.message,
        "warning": result.warning,
        "stats": result.stats.to_dict(),
        "assignments": [
            {
                "position_id": str(a.position_id),
                "recruiter_id": str(a.recruiter_id),
                "recruiter_name": a.recruiter_name,
                "score": a.score,
                "explanation": a.explanation,
            }
            for a in result.assignments
        ],
    }
    print(json.dumps(summary, indent=2, ensure_ascii=False))
    return 0


def cmd_queue(config, args) -> int:
    """Print open, unassigned positions in priority order."""
    from database.database import db_session_scope
    from web.backend.services.suggestion_service import SuggestionService

    with db_session_scope(get_session_factory(config.database.url)) as session:
        ordered = SuggestionService(session, config.allocation).get_queue(interleave=args.interleave)
        for position, priority in ordered:
            print(f"{priority.score:>8.1f}  {priority.queue:<9}  {position.priority}  {position.zone or '-':<10}  {position.title}  ({priority.explanation})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="staffalloc - recruiter assignment engine")
    parser.add_argument('--config', type=str, default='config.yaml', help='Path to config.yaml')
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('init-db', help='Create database tables')
    subparsers.add_parser('serve', help='Run the HTTP API')

    assign = subparsers.add_parser('assign', help='Assign positions to recruiters')
    assign.add_argument('--position-id', action='append', required=True,
                        help='Position to assign (repeat for a batch)')
    assign.add_argument('--force', action='store_true', help='Reassign positions that are not open')

    queue = subparsers.add_parser('queue', help='Show the prioritized open-position queue')
    queue.add_argument('--interleave', action='store_true', help='Interleave queues 2:1:1')
    return parser


COMMANDS = {
    'init-db': cmd_init_db,
    'serve': cmd_serve,
    'assign': cmd_assign,
    'queue': cmd_queue,
}


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    logger.info(f"staffalloc {args.command}")
    return COMMANDS[args.command](config, args)


if __name__ == "__main__":
    sys.exit(main())
