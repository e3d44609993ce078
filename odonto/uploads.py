"""Armazenamento local de arquivos enviados (avatares e documentos).

Arquivos ficam em ``UPLOAD_FOLDER`` com nome ``<hex aleatório>-<nome seguro>``
e são servidos em ``/uploads/<arquivo>``. A remoção é best-effort: falhas são
registradas em log e nunca propagadas.
"""

from __future__ import annotations

import logging
import os
import secrets

from flask import Blueprint, current_app, jsonify, send_from_directory
from flask_wtf.file import FileField, FileRequired
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from .api_forms import UploadForm

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads/"
IMAGENS = ("jpg", "jpeg", "png")

uploads_bp = Blueprint("uploads", __name__)


def upload_folder() -> str:
    return current_app.config["UPLOAD_FOLDER"]


def save_upload(arquivo: FileStorage, prefixo: str = "") -> str:
    """Grava o arquivo de forma síncrona e retorna a URL pública relativa."""
    nome_seguro = secure_filename(arquivo.filename or "") or "arquivo"
    nome = f"{prefixo}{secrets.token_hex(10)}-{nome_seguro}"
    arquivo.save(os.path.join(upload_folder(), nome))
    return URL_PREFIX + nome


def remove_upload(url: str | None) -> bool:
    """Remove o arquivo referenciado pela URL; retorna False se não conseguiu."""
    if not url or not url.startswith(URL_PREFIX):
        return False
    nome = secure_filename(url[len(URL_PREFIX):])
    if not nome:
        return False
    caminho = os.path.join(upload_folder(), nome)
    try:
        os.remove(caminho)
    except OSError as exc:
        logger.warning("Falha ao remover arquivo %s: %s", caminho, exc)
        return False
    return True


class TempUploadForm(UploadForm):
    avatar = FileField("Arquivo", validators=[FileRequired("Arquivo não enviado")])


@uploads_bp.route("/<path:filename>", methods=["GET"])
def servir(filename: str):
    return send_from_directory(upload_folder(), filename)


@uploads_bp.route("/temp", methods=["POST"])
def temp():
    form = TempUploadForm().validar()
    return jsonify({"url": save_upload(form.avatar.data)})
