import subprocess
import sys
import time
import os

def run_process(command, cwd=None):
    print(f"Starting: {' '.join(command)}")
    return subprocess.Popen(
        command,
        cwd=cwd,
        # Create a new process group so we can kill the whole group later
        creationflags=subprocess.CREATE_NEW_PROCESS_GROUP if sys.platform == 'win32' else 0
    )

def main():
    print("="*60)
    print("  COVID-19 OUTBREAK SIMULATOR - DEMO ENVIRONMENT")
    print("="*60)
    print("Starting API server... Press Ctrl+C to stop.")
    print("-" * 60)

    server = None
    try:
        server = run_process(
            [sys.executable, "-m", "uvicorn", "covidsim.main:app", "--port", "8000"],
            cwd=os.path.dirname(os.path.abspath(__file__))
        )
        time.sleep(2)

        print("-" * 60)
        print(">> Simulation API:  http://localhost:8000/api/simulation/state")
        print(">> Start:           POST http://localhost:8000/api/simulation/start")
        print(">> API docs:        http://localhost:8000/docs")
        print("-" * 60)

        # Keep alive
        while True:
            time.sleep(1)
            if server.poll() is not None:
                print(f"API server exited unexpectedly with code {server.returncode}")
                raise KeyboardInterrupt

    except KeyboardInterrupt:
        print("\nStopping API server...")
    finally:
        if server is not None and server.poll() is None:
            if sys.platform == 'win32':
                subprocess.call(['taskkill', '/F', '/T', '/PID', str(server.pid)])
            else:
                server.terminate()
        print("Shutdown complete.")

if __name__ == "__main__":
    main()
