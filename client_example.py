"""
Minimal Python client that requests a certificate through the API and saves the PDF.
Requires: pip install requests
Usage:
  python client_example.py --host http://127.0.0.1:8000 --user admin --password secret --submission 1
"""

import argparse
import time

import requests


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--host", default="http://127.0.0.1:8000")
    parser.add_argument("--user", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--submission", type=int, required=True, help="id of an approved, scored submission")
    parser.add_argument("--force-new", action="store_true")
    parser.add_argument("--output", default="certificate.pdf")
    args = parser.parse_args()

    session = requests.Session()
    # basic auth keeps the example short; use session or token auth in production
    session.auth = (args.user, args.password)

    resp = session.post(
        f"{args.host}/api/certificates/",
        json={"submission_id": args.submission, "force_new": args.force_new},
    )
    resp.raise_for_status()
    cert = resp.json()
    print(f"Certificate requested, id={cert['id']}, tier={cert['tier']}, status={cert['status']}")

    # the download endpoint answers 404 until the certificate is READY
    for _ in range(30):
        r = session.get(f"{args.host}/api/certificates/{cert['id']}/download/")
        if r.status_code == 200:
            if r.headers.get("content-type") == "application/pdf":
                with open(args.output, "wb") as f:
                    f.write(r.content)
                print(f"PDF saved to {args.output}")
            else:
                print(f"PDF stored remotely: {r.json()['url']}")
            return
        if r.status_code == 410:
            print("The stored PDF has expired; request it again with --force-new.")
            return
        time.sleep(2)
    print("Timed out before the certificate was ready.")


if __name__ == "__main__":
    main()
