"""Nginx site configuration rendering."""

from __future__ import annotations

from n8n_provisioner.config import AppSettings, ProxySettings


def render_site(domain: str, app: AppSettings, proxy: ProxySettings) -> str:
    """HTTP-only server block; certbot adds the TLS listener and redirect."""
    return f"""server {{
    listen 80;
    listen [::]:80;
    server_name {domain};

    location /.well-known/acme-challenge/ {{
        root {proxy.acme_webroot};
    }}

    location / {{
        proxy_pass {app.local_url};
        proxy_http_version 1.1;
        proxy_set_header Upgrade $http_upgrade;
        proxy_set_header Connection "upgrade";
        proxy_set_header Host $host;
        proxy_set_header X-Real-IP $remote_addr;
        proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;
        proxy_set_header X-Forwarded-Proto $scheme;
        proxy_buffering off;
        proxy_read_timeout 300s;
    }}
}}
"""
