# -*- coding: utf-8 -*-
# -----------------------------------------------------------------------------
# filename: templates.py
# author: dunamismax
# version: 1.0.0
# date: 10-19-2026
# github: https://github.com/dunamismax
# description: Static configuration templates and placeholder substitution.
# -----------------------------------------------------------------------------
import re
from typing import Any, List

PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")

# Marks a site config that already carries the proxy block.
PROXY_MARKER = "# hostprov: reverse proxy"


def placeholders(template: str) -> List[str]:
    return sorted(set(PLACEHOLDER.findall(template)))


def render(template: str, **params: Any) -> str:
    """
    Substitute ``{{name}}`` tokens with ``params`` values.

    Raises KeyError for a token without a value so a config is never
    written with placeholders left in it.
    """
    missing = [name for name in placeholders(template) if name not in params]
    if missing:
        raise KeyError(f"Missing template parameters: {', '.join(missing)}")
    return PLACEHOLDER.sub(lambda m: str(params[m.group(1)]), template)


# ==============================
# SSH
# ==============================
SSHD_CONFIG = """\
Port 22
Protocol 2
HostKey /etc/ssh/ssh_host_ed25519_key
HostKey /etc/ssh/ssh_host_rsa_key
KexAlgorithms curve25519-sha256@libssh.org
Ciphers chacha20-poly1305@openssh.com,aes256-gcm@openssh.com
MACs hmac-sha2-512-etm@openssh.com
LoginGraceTime 60
PermitRootLogin no
StrictModes yes
MaxAuthTries 3
MaxSessions 3
PubkeyAuthentication yes
PasswordAuthentication yes
PermitEmptyPasswords no
ChallengeResponseAuthentication no
X11Forwarding no
PrintMotd no
AcceptEnv LANG LC_*
Subsystem sftp /usr/lib/openssh/sftp-server
"""

# ==============================
# FTP
# ==============================
VSFTPD_CONF = """\
listen=YES
anonymous_enable=NO
local_enable=YES
write_enable=YES
local_umask=022
dirmessage_enable=YES
use_localtime=YES
xferlog_enable=YES
connect_from_port_20=YES
chroot_local_user=YES
secure_chroot_dir=/var/run/vsftpd/empty
pam_service_name=vsftpd
pasv_min_port={{pasv_min_port}}
pasv_max_port={{pasv_max_port}}
userlist_enable=YES
userlist_file=/etc/vsftpd.userlist
userlist_deny=NO
"""

# ==============================
# Log rotation
# ==============================
LOGROTATE_NGINX = """\
/var/log/nginx/*.log {
    daily
    missingok
    rotate 14
    compress
    delaycompress
    notifempty
    create 0640 www-data adm
    sharedscripts
    postrotate
        /usr/sbin/nginx -s reload
    endscript
}
"""

# ==============================
# Web root
# ==============================
INDEX_HTML = """\
<!DOCTYPE html>
<html>
<head>
    <title>Welcome to {{domain}}</title>
</head>
<body>
    <h1>Success! {{domain}} is working!</h1>
    <p>FTP User: {{ftp_user}}</p>
    <p>SSH/SFTP User: {{ssh_user}}</p>
</body>
</html>
"""

# ==============================
# Nginx
# ==============================
ACME_CHALLENGE_SITE = """\
server {
    listen 80;
    listen [::]:80;
    server_name {{domain}};

    location / {
        return 200 'Certbot verification';
    }
}
"""

# Location/header block shared by the full proxy site and the patch edit.
PROXY_LOCATIONS = """\
    # Hotlink protection for HLS playlist
    location ~ \\.m3u8$ {
        valid_referers {{referers}};
        if ($invalid_referer) {
            return 403;
        }
        proxy_pass http://{{upstream}};
    }

    # Optional: Protect .ts video chunks
    location ~ \\.ts$ {
        valid_referers {{referers}};
        if ($invalid_referer) {
            return 403;
        }
        proxy_pass http://{{upstream}};
    }

    # General proxy config
    location / {
        proxy_pass http://{{upstream}};
        proxy_set_header Host $host;
        proxy_set_header X-Real-IP $remote_addr;
        proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;
        proxy_set_header X-Forwarded-Proto $scheme;

        proxy_http_version 1.1;
        proxy_set_header Upgrade $http_upgrade;
        proxy_set_header Connection "upgrade";

        proxy_buffering off;
        proxy_request_buffering off;
    }

    # Security headers
    add_header Strict-Transport-Security "max-age=31536000; includeSubDomains" always;
    add_header X-Frame-Options DENY;
    add_header X-Content-Type-Options nosniff;

    # Timeouts & uploads
    proxy_connect_timeout 600s;
    proxy_send_timeout 600s;
    proxy_read_timeout 600s;
    send_timeout 600s;
    client_max_body_size 100M;
"""

PROXY_PATCH_BLOCK = "\n    " + PROXY_MARKER + "\n" + PROXY_LOCATIONS

PROXY_SITE = (
    """\
server {
    server_name {{domain}};
    listen [::]:443 ssl ipv6only=on; # managed by Certbot
    listen 443 ssl;

"""
    + PROXY_LOCATIONS
    + """
    ssl_certificate {{ssl_dir}}/fullchain.pem;
    ssl_certificate_key {{ssl_dir}}/privkey.pem;
    include /etc/letsencrypt/options-ssl-nginx.conf;
    ssl_dhparam /etc/letsencrypt/ssl-dhparams.pem;
}

server {
    if ($host = {{domain}}) {
        return 301 https://$host$request_uri;
    }
    listen 80;
    listen [::]:80;
    server_name {{domain}};
    return 404;
}
"""
)

MEDIA_SITE = """\
server {
    listen 80;
    server_name {{domain}} www.{{domain}};

    access_log /var/log/nginx/{{domain}}.access.log;
    error_log /var/log/nginx/{{domain}}.error.log;

    root {{web_root}};
    index index.html;

    # Hotlink-protected stream paths served by the upstream
    location ~ \\.(m3u8|ts)$ {
        valid_referers {{referers}};
        if ($invalid_referer) {
            return 403;
        }
        proxy_pass http://{{upstream}};
    }

    location / {
        try_files $uri $uri/ =404;
    }
}
"""
