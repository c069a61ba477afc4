# ==============================================================================
# APP NEGOCIO - Catálogo de celofán y cuentas por pagar
# ==============================================================================
