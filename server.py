import uvicorn
import sys
import re


def is_valid_ip(ip: str) -> bool:
    pattern = r'^(\d{1,3}\.){3}\d{1,3}$'
    if re.match(pattern, ip):
        octets = ip.split('.')
        return all(0 <= int(octet) <= 255 for octet in octets)
    return False

def is_valid_port(port: str) -> bool:
    return port.isdigit() and 0 <= int(port) <= 65535

def argument_value(flag: str, example: str) -> str:
    try:
        return sys.argv[sys.argv.index(flag) + 1]
    except IndexError:
        print(f"Argument {flag} requires a value (ex. '{flag} {example}')")
        sys.exit(1)


if __name__ == "__main__":

    args = {
        "app": "app.main:app",
        "host": "0.0.0.0",
        "port": 8000,
        "reload": False,
        "reload_excludes": ["app/alembic/*", "app/alembic/versions/*.py"]
    }

    if "--https" in sys.argv:
        args.update({
            "ssl_keyfile": "app/key.pem",
            "ssl_certfile": "app/cert.pem"
        })

    if "--dev" in sys.argv:
        args.update({
            "reload": True,
        })

    if "--host" in sys.argv:
        host = argument_value("--host", "0.0.0.0")

        if not is_valid_ip(host):
            print("Invalid host")
            sys.exit(1)

        args.update({
            "host": host
        })

    if "--port" in sys.argv:
        port = argument_value("--port", "80")

        if not is_valid_port(port):
            print("Invalid port")
            sys.exit(1)

        args.update({
            "port": int(port)
        })

    uvicorn.run(**args)
