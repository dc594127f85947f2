import argparse
import logging
import sys

from engine import VillageEngine
from systems import config_village as cfg


def _engine(args) -> VillageEngine:
    return VillageEngine(save_dir=args.save_dir, width=8, height=8)


def _load(eng: VillageEngine, path: str) -> bool:
    result = eng.load(path)
    if not result:
        print(result.message)
    return result.ok


def cmd_new(args):
    eng = VillageEngine(save_dir=args.save_dir, width=args.width, height=args.height,
                        seed=args.seed, tile_size=args.tile_size)
    ts = eng.world.tile_size
    for entry in args.village or []:
        name, rest = entry.split(":")
        tx, ty = map(int, rest.split(","))
        eng.found_settlement(tx * ts, ty * ts, name=name)
    result = eng.save(args.name)
    print(result.message)
    return 0 if result.ok else 1


def cmd_list(args):
    eng = _engine(args)
    entries = eng.list_snapshots()
    if not entries:
        print(f"No saves in {eng.save_dir}")
    for e in entries:
        print(f"{e.filename}\t{e.date_label}\t{e.summary_label}")
    return 0


def cmd_summary(args):
    eng = _engine(args)
    if not _load(eng, args.snapshot):
        return 1
    print(eng.summary())
    return 0


def cmd_queue(args):
    eng = _engine(args)
    if not _load(eng, args.snapshot):
        return 1
    settlement = eng.world.get_settlement(args.settlement)
    if settlement is None:
        print(f"No settlement with id {args.settlement}")
        return 1
    for _ in range(args.count):
        result = eng.enqueue(settlement.id, args.type)
        print(result.message)
        if not result:
            break
    dispatched = 0
    while eng.has_pending(settlement.id) and eng.dispatch_construction(settlement.id):
        dispatched += 1
    print(f"Dispatched {dispatched} work item(s) for {settlement.name}")
    result = eng.save(args.save)
    print(result.message)
    return 0 if result.ok else 1


def main(argv=None):
    ap = argparse.ArgumentParser(description="Headless CLI for village saves")
    ap.add_argument("--save-dir", default=cfg.SAVE_DIR)
    ap.add_argument("--verbose", action="store_true", help="Log to stderr")
    sub = ap.add_subparsers()

    ap_new = sub.add_parser("new", help="Create a new world and save it")
    ap_new.add_argument("--width", type=int, default=cfg.MAP_WIDTH)
    ap_new.add_argument("--height", type=int, default=cfg.MAP_HEIGHT)
    ap_new.add_argument("--seed", type=int, default=12345)
    ap_new.add_argument("--tile-size", type=int, default=cfg.TILE_SIZE)
    ap_new.add_argument("--village", action="append", help="e.g. 'Aldwick:10,10' in tiles (can repeat)")
    ap_new.add_argument("--name", default=None, help="Save name (default: timestamped)")
    ap_new.set_defaults(func=cmd_new)

    ap_list = sub.add_parser("list", help="List saves, newest first")
    ap_list.set_defaults(func=cmd_list)

    ap_sum = sub.add_parser("summary", help="Load a save and print its summary")
    ap_sum.add_argument("snapshot")
    ap_sum.set_defaults(func=cmd_summary)

    ap_q = sub.add_parser("queue", help="Queue structures for a settlement and start building")
    ap_q.add_argument("snapshot")
    ap_q.add_argument("--settlement", type=int, required=True)
    ap_q.add_argument("--type", choices=sorted(cfg.BUILDING_TYPES), required=True)
    ap_q.add_argument("--count", type=int, default=1)
    ap_q.add_argument("--save", default=None, help="Save name for the result")
    ap_q.set_defaults(func=cmd_queue)

    args = ap.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    if hasattr(args, "func"):
        return args.func(args)
    ap.print_help()
    return 0

if __name__ == "__main__":
    sys.exit(main())
