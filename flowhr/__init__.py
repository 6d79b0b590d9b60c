"""FlowHR gateway — authenticated proxy to the HR backend plus i18n."""
