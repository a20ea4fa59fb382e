import yaml
from kubernetes import client, utils
from kubernetes.client import ApiException

GROUP = "kubewait.io"
VERSION = "v1alpha1"
PLURAL = "kubewaits"
CRD_NAME = f"{PLURAL}.{GROUP}"

_CRD = """
apiVersion: apiextensions.k8s.io/v1
kind: CustomResourceDefinition
metadata:
  name: kubewaits.kubewait.io
spec:
  group: kubewait.io
  scope: Namespaced
  names:
    kind: KubeWait
    plural: kubewaits
    singular: kubewait
    shortNames: ["kw"]
  versions:
    - name: v1alpha1
      served: true
      storage: true
      subresources:
        status: {}
      additionalPrinterColumns:
        - name: Resource
          type: string
          jsonPath: .spec.resource
        - name: For
          type: string
          jsonPath: .spec.for
        - name: Met
          type: boolean
          jsonPath: .status.conditionMet
        - name: Message
          type: string
          jsonPath: .status.message
      schema:
        openAPIV3Schema:
          type: object
          properties:
            spec:
              type: object
              required: ["for", "resource"]
              properties:
                for:
                  type: string
                resource:
                  type: string
                name:
                  type: string
                namespace:
                  type: string
                all:
                  type: boolean
                  default: false
                timeout:
                  type: integer
                  minimum: 1
                  default: 300
                checkInterval:
                  type: integer
                  minimum: 1
                  default: 5
                checkOnce:
                  type: boolean
                  default: false
                labels:
                  type: string
                fieldSelector:
                  type: string
                kubeConfigType:
                  type: string
                  enum: ["auto", "raw", "file", "provider"]
                kubeConfig:
                  type: string
                context:
                  type: string
            status:
              type: object
              x-kubernetes-preserve-unknown-fields: true
"""


def ensure_crd_installed(apis) -> None:
    api_ext = client.ApiextensionsV1Api(apis["dyn"])
    try:
        api_ext.read_custom_resource_definition(CRD_NAME)
        return
    except ApiException as e:
        if e.status != 404:
            raise
    utils.create_from_yaml(apis["dyn"], yaml_objects=list(yaml.safe_load_all(_CRD)))
