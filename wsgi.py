# ==============================================================================
# WSGI Entry Point - Para Gunicorn en producción
# ==============================================================================
# Este archivo es el punto de entrada para servidores WSGI como Gunicorn.
#
# USO:
#   gunicorn wsgi:app --bind 0.0.0.0:$PORT
#
# ESTRUCTURA DEL PROYECTO:
#   repo_root/           <- Directorio de trabajo (en sys.path automáticamente)
#   ├── wsgi.py          <- Este archivo
#   ├── pyproject.toml
#   └── app_negocio/     <- Paquete Python
#       ├── main.py
#       ├── services/
#       └── repositories/
#
# Con esta estructura los imports absolutos funcionan sin tocar sys.path:
#   from app_negocio.main import app
# ==============================================================================

from app_negocio.main import app

if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5000)
