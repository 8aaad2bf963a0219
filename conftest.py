# =============================================================================
# CONFTEST - Raiz do projeto
# =============================================================================
# Permite rodar pytest sem instalar o pacote (fixtures ficam em tests/)
# =============================================================================

import sys
from pathlib import Path

# Adicionar root ao path
sys.path.insert(0, str(Path(__file__).parent))
