import subprocess
import sys
import time
import os
import webbrowser

def _tail_file_bytes(path: str, max_bytes: int = 6000) -> str:
    try:
        with open(path, "rb") as f:
            f.seek(0, os.SEEK_END)
            size = f.tell()
            f.seek(max(0, size - max_bytes), os.SEEK_SET)
            data = f.read(max_bytes)
    except OSError:
        return ""
    return data.decode("utf-8", errors="replace")

def _terminate_process(proc: subprocess.Popen, timeout_sec: float = 3.0) -> None:
    if proc.poll() is None:
        proc.terminate()
    try:
        proc.wait(timeout=timeout_sec)
    except subprocess.TimeoutExpired:
        proc.kill()

def main():
    root_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    data_dir = os.path.join(root_dir, "data")
    os.makedirs(data_dir, exist_ok=True)

    env = os.environ.copy()
    host = env.get("HOST", "0.0.0.0")
    port = env.get("PORT", "3000")
    open_browser = env.get("CENTERFINDER_OPEN_BROWSER", "").strip() == "1"
    reset_logs = env.get("CENTERFINDER_RESET_LOGS", "").strip() == "1"

    out_path = os.path.join(data_dir, "uvicorn.out")
    err_path = os.path.join(data_dir, "uvicorn.err")
    mode = "wb" if reset_logs else "ab"

    with open(out_path, mode, buffering=0) as web_out, open(err_path, mode, buffering=0) as web_err:
        print(f"Starting API from {root_dir}...")
        proc = subprocess.Popen(
            [sys.executable, "-m", "uvicorn", "api.main:app", "--host", str(host), "--port", str(port)],
            cwd=root_dir,
            stdout=web_out,
            stderr=web_err,
            env=env,
        )
        print(f"API started (PID: {proc.pid}) at http://127.0.0.1:{port}")

        if open_browser:
            time.sleep(2)
            webbrowser.open(f"http://127.0.0.1:{port}/health")

        try:
            while proc.poll() is None:
                time.sleep(1)
            print(f"API exited unexpectedly with code {proc.returncode}.")
            print(f"Log: {err_path}")
            tail = _tail_file_bytes(err_path)
            if tail:
                print("Tail of uvicorn.err:")
                print(tail)
        except KeyboardInterrupt:
            print("Stopping API...")
            _terminate_process(proc)

if __name__ == "__main__":
    main()
