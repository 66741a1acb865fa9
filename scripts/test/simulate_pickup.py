# scripts/test/simulate_pickup.py
"""
Walk a running backend through one pickup: launch a billboard, enter a code at
the "kiosk", then print the pickup list the billboards would show.
Needs real Planning Center credentials on the backend for the code to match.
"""

import argparse
import requests
from datetime import date

BACKEND_URL = "http://localhost:3001/api"


def launch(args, headers):
    resp = requests.post(f"{BACKEND_URL}/set-global-billboard", headers=headers, timeout=15, json={
        "eventId": args.event,
        "eventName": args.name,
        "securityCodes": args.codes,
        "eventDate": args.date,
    })
    print(f"📋 set-global-billboard → HTTP {resp.status_code}: {resp.json()}")
    resp.raise_for_status()


def enter_code(args, headers):
    resp = requests.post(f"{BACKEND_URL}/security-code-entry", headers=headers, timeout=15, json={
        "securityCode": args.kiosk_code,
        "eventId": args.event,
        "eventDate": args.date,
    })
    body = resp.json()
    mark = "✅" if body.get("success") else "⚠️"
    print(f"{mark} security-code-entry {args.kiosk_code} → HTTP {resp.status_code}: {body.get('message')}")


def show_notifications(args, headers):
    resp = requests.get(f"{BACKEND_URL}/active-notifications", headers=headers, timeout=15,
                        params={"eventId": args.event, "eventDate": args.date})
    if resp.status_code != 200:
        print(f"❌ active-notifications → HTTP {resp.status_code}: {resp.text}")
        return
    notifications = resp.json()
    print(f"🔔 {len(notifications)} child(ren) awaiting pickup:")
    for n in notifications:
        print(f"   {n['securityCode']:<6} {n['childName']:<24} {n['locationName']}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Simulate an admin launch and a kiosk pickup")
    parser.add_argument("--event", required=True, help="Planning Center event id")
    parser.add_argument("--name", default="Test Event")
    parser.add_argument("--date", default=date.today().isoformat(), help="YYYY-MM-DD")
    parser.add_argument("--codes", nargs="+", default=["ABC1"])
    parser.add_argument("--kiosk-code", default="ABC1")
    parser.add_argument("--user", default="sim-admin")
    parser.add_argument("--api-key", default=None)
    args = parser.parse_args()

    headers = {"X-User-ID": args.user, "X-User-Name": "Simulator"}
    if args.api_key:
        headers["X-API-Key"] = args.api_key

    launch(args, headers)
    enter_code(args, headers)
    show_notifications(args, headers)
