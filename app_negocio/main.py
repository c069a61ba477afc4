from flask import Flask, render_template, request, redirect, url_for, session, flash, send_file, Response
from functools import wraps
import logging
import uuid

# Sistema de profiling interno
from app_negocio.performance_logger import init_profiling

from app_negocio.config import Config, configure_logging
from app_negocio.models import ESTADOS_CUENTA

# ═══════════════════════════════════════════════════════════════════════════
# CONTENEDOR DE DEPENDENCIAS - Servicios y Repositorios
# ═══════════════════════════════════════════════════════════════════════════
# Las rutas solo traducen formularios a llamadas de servicio y los avisos
# del Notifier a flash(). Toda la lógica vive en services/.
# ═══════════════════════════════════════════════════════════════════════════
from app_negocio.app_container import get_container
from app_negocio.services import Notifier

configure_logging()
logger = logging.getLogger(__name__)

app = Flask(__name__)

# ═══════════════════════════════════════════════════════════════════════════
# INICIALIZAR SISTEMA DE PROFILING
# ═══════════════════════════════════════════════════════════════════════════
# Mide rendimiento de rutas y funciones. Logs en /logs/
# Para desactivar: ENABLE_PROFILING=0
init_profiling(app)

# ═══════════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN DE SESIONES
# ═══════════════════════════════════════════════════════════════════════════════
# SECRET_KEY: En producción DEBE definirse via variable de entorno
# Comando: export NEGOCIO_SECRET_KEY="tu_clave_secreta_muy_larga_y_aleatoria"
for _warning in Config.warnings():
    logger.warning("[ADVERTENCIA] %s", _warning)

app.secret_key = Config.SECRET_KEY

app.config.update(
    SESSION_COOKIE_HTTPONLY=True,      # Protege contra XSS
    SESSION_COOKIE_SECURE=False,       # False para HTTP local (True solo para HTTPS)
    SESSION_COOKIE_SAMESITE='Lax',     # Protección CSRF básica
    PERMANENT_SESSION_LIFETIME=86400,  # 24 horas
)

CUENTA_FIELDS = ('fecha', 'proveedor', 'importe', 'estado', 'descripcion', 'gasto_id')
PRODUCTO_FIELDS = ('nombre', 'existencia', 'precio', 'unidad')


# ═══════════════════════════════════════════════════════════════════════════════
# SEGURIDAD - CSRF y cabeceras
# ═══════════════════════════════════════════════════════════════════════════════

def generate_csrf_token():
    if 'csrf_token' not in session:
        session['csrf_token'] = uuid.uuid4().hex
    return session['csrf_token']


@app.context_processor
def inject_csrf_token():
    return {'csrf_token': generate_csrf_token()}


def verify_csrf(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if request.method == 'POST':
            token = session.get('csrf_token')
            form_token = (
                request.form.get('csrf_token') or
                request.headers.get('X-CSRF-Token') or
                request.headers.get('X-CSRFToken')
            )
            if not token or not form_token or token != form_token:
                flash('Sesión expirada. Por favor intenta de nuevo.', 'warning')
                return redirect(url_for('index'))
        return f(*args, **kwargs)
    return wrapper


@app.after_request
def set_security_headers(response):
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['Referrer-Policy'] = 'no-referrer-when-downgrade'
    response.headers['Permissions-Policy'] = 'geolocation=(), microphone=()'
    # HSTS solo con HTTPS real
    if request.is_secure:
        response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
    return response


# Bloquea acceso a carpetas que no deben ser públicas
@app.route('/logs/<path:filename>')
def block_sensitive_routes(filename):
    return "Not Found", 404


# ═══════════════════════════════════════════════════════════════════════════════
# UTILIDADES DE RUTAS
# ═══════════════════════════════════════════════════════════════════════════════

def flash_alerts(notifier):
    """Pasa los avisos del Notifier a flash() en el mismo orden."""
    for alert in notifier.alerts:
        flash(f"{alert.title}: {alert.message}", alert.level)


def parse_id(raw):
    """Id entero desde un formulario o query string; None si no es válido."""
    raw = (raw or '').strip()
    return int(raw) if raw.isdecimal() else None


def send_shared(shared):
    return send_file(
        shared.path,
        mimetype=shared.mimetype,
        as_attachment=True,
        download_name=shared.filename,
    )


def render_confirm(notifier, action):
    """Página de confirmación destructiva con el último pedido del Notifier."""
    confirmation = notifier.confirmations[-1]
    return render_template(
        'confirmar_eliminar.html',
        title=confirmation.title,
        message=confirmation.message,
        action=action,
    )


@app.route('/')
def index():
    return redirect(url_for('cuentas'))


# ═══════════════════════════════════════════════════════════════════════════════
# CELOFÁN
# ═══════════════════════════════════════════════════════════════════════════════

def render_celofan(service, status=200):
    state = service.state
    return render_template(
        'celofan.html',
        productos=service.productos,
        form=state.form,
        editing_id=state.editing_id,
    ), status


@app.route('/celofan')
def celofan():
    notifier = Notifier()
    service = get_container().celofan_service(notifier)
    service.fetch()

    editar = parse_id(request.args.get('editar'))
    if editar is not None:
        product = service.find(editar)
        if product:
            service.begin_edit(product)
        else:
            flash('Producto no encontrado.', 'warning')

    flash_alerts(notifier)
    return render_celofan(service)


@app.route('/celofan/guardar', methods=['POST'])
@verify_csrf
def celofan_guardar():
    notifier = Notifier()
    service = get_container().celofan_service(notifier)
    for name in PRODUCTO_FIELDS:
        service.handle_change(name, request.form.get(name, ''))
    service.state.editing_id = parse_id(request.form.get('id'))

    if service.save():
        flash_alerts(notifier)
        flash('Producto guardado.', 'success')
        return redirect(url_for('celofan'))

    # El formulario se conserva para corregirlo
    service.fetch()
    flash_alerts(notifier)
    return render_celofan(service, 400)


@app.route('/celofan/<int:product_id>/eliminar', methods=['POST'])
@verify_csrf
def celofan_eliminar(product_id):
    notifier = Notifier(confirmed=request.form.get('confirmado') == '1')
    service = get_container().celofan_service(notifier)

    if not service.request_delete(product_id):
        if not notifier.alerts:
            return render_confirm(notifier, url_for('celofan_eliminar', product_id=product_id))
    flash_alerts(notifier)
    return redirect(url_for('celofan'))


@app.route('/celofan/exportar/<formato>')
def celofan_exportar(formato):
    if formato not in ('excel', 'pdf'):
        return "Not Found", 404

    notifier = Notifier()
    service = get_container().celofan_service(notifier)
    service.fetch()
    shared = service.export_excel() if formato == 'excel' else service.export_pdf()
    if shared is None:
        flash_alerts(notifier)
        return redirect(url_for('celofan'))
    return send_shared(shared)


# ═══════════════════════════════════════════════════════════════════════════════
# CUENTAS POR PAGAR
# ═══════════════════════════════════════════════════════════════════════════════

def render_cuentas(service, status=200):
    state = service.state
    cuentas = service.cuentas_filtradas
    return render_template(
        'cuentas_por_pagar.html',
        cuentas=cuentas,
        total=len(cuentas),
        gastos=state.gastos,
        busqueda=state.busqueda,
        mostrar_formulario=state.mostrar_formulario,
        form=state.form,
        estados=ESTADOS_CUENTA,
        empty_message=service.empty_message,
    ), status


@app.route('/cuentas')
def cuentas():
    notifier = Notifier()
    service = get_container().cuentas_service(notifier)
    service.mount()
    service.set_busqueda(request.args.get('q', ''))

    editar = parse_id(request.args.get('editar'))
    if editar is not None:
        cuenta = service.find(editar)
        if cuenta:
            service.begin_edit(cuenta)
        else:
            flash('Cuenta no encontrada.', 'warning')
    elif request.args.get('nuevo') == '1':
        service.open_form()

    flash_alerts(notifier)
    return render_cuentas(service)


@app.route('/cuentas/guardar', methods=['POST'])
@verify_csrf
def cuentas_guardar():
    notifier = Notifier()
    service = get_container().cuentas_service(notifier)
    for name in CUENTA_FIELDS:
        service.handle_change(name, request.form.get(name, ''))
    service.state.form.id = parse_id(request.form.get('id'))
    service.state.mostrar_formulario = True
    service.set_busqueda(request.form.get('q', ''))

    if service.save():
        flash_alerts(notifier)
        return redirect(url_for('cuentas', q=service.state.busqueda or None))

    service.mount()
    flash_alerts(notifier)
    return render_cuentas(service, 400)


@app.route('/cuentas/<int:cuenta_id>/eliminar', methods=['POST'])
@verify_csrf
def cuentas_eliminar(cuenta_id):
    notifier = Notifier(confirmed=request.form.get('confirmado') == '1')
    service = get_container().cuentas_service(notifier)

    if not service.request_delete(cuenta_id):
        if not notifier.alerts:
            return render_confirm(notifier, url_for('cuentas_eliminar', cuenta_id=cuenta_id))
    flash_alerts(notifier)
    return redirect(url_for('cuentas'))


@app.route('/cuentas/exportar/<formato>')
def cuentas_exportar(formato):
    if formato not in ('excel', 'pdf', 'html'):
        return "Not Found", 404

    notifier = Notifier()
    service = get_container().cuentas_service(notifier)
    service.fetch_cuentas()
    service.set_busqueda(request.args.get('q', ''))

    if formato == 'html':
        document = service.export_html()
        if document is not None:
            return Response(document, mimetype='text/html')
    else:
        shared = service.export_excel() if formato == 'excel' else service.export_pdf()
        if shared is not None:
            return send_shared(shared)

    flash_alerts(notifier)
    return redirect(url_for('cuentas', q=service.state.busqueda or None))


if __name__ == "__main__":
    import os
    # En producción usar WSGI (gunicorn, waitress, etc.)
    DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'
    HOST = os.environ.get('FLASK_HOST', '0.0.0.0')
    PORT = int(os.environ.get('FLASK_PORT', 5000))

    if not DEBUG:
        print(f"\n{'='*50}")
        print(f"  Servidor iniciado en http://{HOST}:{PORT}")
        print(f"  Acceso local: http://localhost:{PORT}")
        print(f"{'='*50}\n")

    app.run(host=HOST, port=PORT, debug=DEBUG)
