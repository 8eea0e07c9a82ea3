"""Lightweight REST client for the draftxi API."""

from __future__ import annotations

import argparse
import json

import httpx


def _print(payload) -> None:
    print(json.dumps(payload, indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the draftxi REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("--mode", default="classic", choices=["classic", "wildcard"], help="Game mode to start")
    parser.add_argument("--formation", default=None, help="Formation to switch to after starting")
    parser.add_argument("--buy", nargs="*", default=[], help="Player slugs to buy in order")
    parser.add_argument("--stop-as", metavar="USERNAME", help="Stop the draft and record a leaderboard entry")
    parser.add_argument("--leaderboard", action="store_true", help="Print the leaderboard and exit")
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url) as client:
        if args.leaderboard:
            resp = client.get("/leaderboard")
            resp.raise_for_status()
            _print(resp.json())
            return

        resp = client.post("/drafts", json={"mode": args.mode})
        resp.raise_for_status()
        draft = resp.json()
        draft_id = draft["draft_id"]
        print(f"Started {draft['mode']} draft {draft_id} with purse {draft['purse']}")

        if args.formation:
            resp = client.post(f"/drafts/{draft_id}/formation", json={"formation": args.formation})
            resp.raise_for_status()

        for slug in args.buy:
            resp = client.post(f"/drafts/{draft_id}/buy", json={"slug": slug})
            if resp.status_code == 409:
                detail = resp.json()["detail"]
                print(f"Could not buy {slug}: {detail['reason']} ({detail['message']})")
                continue
            resp.raise_for_status()
            print(f"Bought {slug}; purse now {resp.json()['purse']}")

        if args.stop_as:
            resp = client.post(f"/drafts/{draft_id}/stop", json={"username": args.stop_as})
            resp.raise_for_status()
            print(f"Final score: {resp.json()['final_score']}")
        else:
            resp = client.get(f"/drafts/{draft_id}")
            resp.raise_for_status()
            _print(resp.json())


if __name__ == "__main__":
    main()
