import json
import os
import sys
import urllib.request

BASE = os.getenv("VTIMES_PROBE_BASE", "http://127.0.0.1:3333")


def call(name, arguments, base=BASE):
    url = f"{base}/mcp/call"
    payload = {"kind": "tool", "name": name, "args": arguments}
    req = urllib.request.Request(
        url,
        data=json.dumps(payload).encode("utf-8"),
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    with urllib.request.urlopen(req, timeout=30) as resp:
        return resp.read().decode("utf-8", errors="replace")


def plan(argv):
    """Tool calls for a command line: no argument lists devices, a JSON batch is sent as-is."""
    if len(argv) > 1:
        return [("send_operate", {"input": json.loads(argv[1])})]
    return [("get_all_device", {})]


def main(argv=None):
    for name, args in plan(sys.argv if argv is None else argv):
        print("\n===", name, "===")
        print(call(name, args)[:12000])


if __name__ == "__main__":
    main()
