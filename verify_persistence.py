"""
Persistence check against a running database.

Starts the API, records a client and a work, restarts the API and verifies
that the balance and its history survived. Needs DATABASE_URL pointing at a
real database (an in-memory SQLite URL would not persist).
"""

import time
import subprocess
import httpx
import sys
import os
import signal

BASE_URL = "http://127.0.0.1:8000"
API_PREFIX = "/v1"
SERVER_CMD = [
    sys.executable, "-m", "uvicorn", "ledger_backend.app.main:app",
    "--host", "127.0.0.1", "--port", "8000",
]


def wait_for_server(retries=10, delay=2):
    url = f"{BASE_URL}/health"
    print(f"Waiting for server at {url}...")
    for _ in range(retries):
        try:
            resp = httpx.get(url)
            if resp.status_code == 200:
                print("✅ Server is up!")
                return True
        except httpx.ConnectError:
            pass
        time.sleep(delay)
    print("❌ Server failed to start.")
    return False


def stop(proc):
    proc.send_signal(signal.SIGTERM)
    proc.wait()


def run_verification():
    print("\n--- [Step 1] Starting Server (Initial) ---")
    proc = subprocess.Popen(
        SERVER_CMD,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env={**os.environ, "DB_ECHO": "True"},
    )

    try:
        if not wait_for_server():
            server_logs = proc.communicate(timeout=2)
            print("Server Stderr:", server_logs[1].decode())
            raise Exception("Server start failed")

        print("\n--- [Step 2] Recording Client And Work ---")
        client_payload = {
            "name": "Persistence Check",
            "date_of_birth": "01/01/1980",
            "address": "12 Persistence Road, Kolkata",
            "phone": f"98{int(time.time()) % 100000000:08d}",
            "work_types": ["income-tax"],
        }
        resp = httpx.post(f"{BASE_URL}{API_PREFIX}/clients", json=client_payload)
        if resp.status_code != 201:
            raise Exception(f"Client creation failed: {resp.status_code} {resp.text}")
        client_id = resp.json()["id"]

        work_payload = {
            "client_id": client_id,
            "transaction_date": time.strftime("%d/%m/%Y"),
            "work_types": ["income-tax"],
            "description": "ITR filing",
            "total_price": 150000,
            "paid_amount": 50000,
        }
        resp = httpx.post(f"{BASE_URL}{API_PREFIX}/works", json=work_payload)
        if resp.status_code != 201:
            raise Exception(f"Work creation failed: {resp.status_code} {resp.text}")
        print(f"✅ Client {client_id} charged 100000")

    finally:
        print("\n--- [Step 3] Stopping Server ---")
        stop(proc)

    time.sleep(2)  # Wait for port release

    print("\n--- [Step 4] Restarting Server (Verification) ---")
    proc2 = subprocess.Popen(SERVER_CMD, stdout=subprocess.PIPE, stderr=subprocess.PIPE)

    try:
        if not wait_for_server():
            raise Exception("Server restart failed")

        print("\n--- [Step 5] Verifying Balance And History ---")
        resp = httpx.get(f"{BASE_URL}{API_PREFIX}/clients/{client_id}")
        if resp.status_code != 200 or resp.json()["balance"] != 100000:
            raise Exception(f"Balance not persisted: {resp.status_code} {resp.text}")

        resp = httpx.get(f"{BASE_URL}{API_PREFIX}/clients/{client_id}/balance-history")
        history = resp.json()
        if history["total"] != 1 or history["history"][0]["change_type"] != "work_created":
            raise Exception(f"History not persisted: {resp.text}")
        print("✅ Balance and history persisted")

    finally:
        print("\n--- [Step 6] Stopping Server ---")
        stop(proc2)


if __name__ == "__main__":
    run_verification()
