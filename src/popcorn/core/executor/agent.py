"""Script installed into the page to support the action executor.

The agent lives on ``window.__popcornAgent`` and disappears on every full
navigation, which is how liveness is checked.
"""

AGENT_SCRIPT = """
() => {
  if (window.__popcornAgent) return true;

  const MODAL_SELECTORS = [
    'dialog[open]', '[role="dialog"]', '[role="alertdialog"]',
    '[aria-modal="true"]', '.modal.show', '.modal.open', '.modal.is-open',
  ];
  const DISMISS_SELECTORS = [
    '[data-dismiss="modal"]', '[data-bs-dismiss="modal"]',
    'button[aria-label="Close"]', 'button[aria-label="close"]',
    '.modal-close', '.close', '.btn-close',
  ];

  const isVisible = (el) => {
    const rect = el.getBoundingClientRect();
    const style = getComputedStyle(el);
    return rect.width > 0 && rect.height > 0
      && style.visibility !== 'hidden' && style.display !== 'none';
  };

  const cssPath = (el) => {
    if (el.id) return '#' + CSS.escape(el.id);
    const parts = [];
    while (el && el.nodeType === 1 && parts.length < 6) {
      let part = el.tagName.toLowerCase();
      const parent = el.parentElement;
      if (parent) {
        const same = [...parent.children].filter((c) => c.tagName === el.tagName);
        if (same.length > 1) part += `:nth-of-type(${same.indexOf(el) + 1})`;
      }
      parts.unshift(part);
      if (el.id) break;
      el = parent;
    }
    return parts.join(' > ');
  };

  const openModals = () => [...new Set(
    MODAL_SELECTORS.flatMap((s) => [...document.querySelectorAll(s)])
  )].filter(isVisible);

  const dismissFor = (modal) => DISMISS_SELECTORS
    .map((s) => modal.querySelector(s))
    .find((el) => el && isVisible(el));

  let lastMutation = Date.now();
  new MutationObserver(() => { lastMutation = Date.now(); }).observe(
    document.documentElement,
    { subtree: true, childList: true, attributes: true, characterData: true },
  );

  let before = new Set();

  window.__popcornAgent = {
    ping: () => true,
    snapshotModals: () => { before = new Set(openModals()); return before.size; },
    openModalCount: () => openModals().length,
    detectModal: () => {
      const modal = openModals().find((m) => !before.has(m));
      if (!modal) return null;
      const dismiss = dismissFor(modal);
      const role = modal.getAttribute('role');
      return {
        type: modal.tagName.toLowerCase() === 'dialog' ? 'dialog' : (role || 'modal'),
        selector: cssPath(modal),
        dismissSelector: dismiss ? cssPath(dismiss) : null,
      };
    },
    dismissSelector: () => {
      for (const modal of openModals()) {
        const dismiss = dismissFor(modal);
        if (dismiss) return cssPath(dismiss);
      }
      return null;
    },
    msSinceMutation: () => Date.now() - lastMutation,
  };
  return true;
}
"""

PING_SCRIPT = "() => Boolean(window.__popcornAgent && window.__popcornAgent.ping())"
