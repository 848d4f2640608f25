"""App — coração do motor de certificação: orquestração e infraestrutura.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- flow/: controller da travessia do cliente (sessão + etapas)
- rendering/: seções de página → árvore de RenderNode
- auth/: sub-componente de login (email + OAuth)
- services/: tokens de estilo, carga de conteúdo, managers do editor
- domain/: modelos de sessão, snapshot, seções e tokens
- infra/: implementações concretas de IO (Supabase/httpx e memória)
- protocols/: contratos/interfaces
- observability/: correlation ids e métricas em log estruturado
- assets/: templates iniciais (YAML)

Padrão: app executa; fsm governa; config configura; utils apoia.
"""
